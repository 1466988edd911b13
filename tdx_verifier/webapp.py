import os, dataclasses, tempfile
from flask import Flask, request, jsonify
from .config import ConfigError, Settings
from .conclusion import conclude, recommendations
from .result import ArtifactKind
from .verifier import verify_all, verify_path

app = Flask(__name__)

def _settings() -> Settings:
    return app.config.get('TDX_SETTINGS') or Settings.from_env()

@app.errorhandler(ConfigError)
def config_error(e):
    return jsonify({'error': 'bad configuration', 'detail': str(e)}), 500

@app.get('/')
def index():
    return INDEX_HTML

@app.post('/verify')
def verify():
    if 'file' not in request.files:
        return jsonify({'error': 'no file'}), 400
    try:
        kind = ArtifactKind(request.form.get('kind', 'evidence'))
    except ValueError:
        return jsonify({'error': 'unknown kind', 'kinds': [k.value for k in ArtifactKind]}), 400
    settings = _settings()
    f = request.files['file']
    fd, tmp_path = tempfile.mkstemp(prefix='tdx-upload-')
    os.close(fd)
    try:
        f.save(tmp_path)
        res = verify_path(kind, tmp_path, timeout=settings.parse_timeout)
    finally:
        os.remove(tmp_path)
    res = dataclasses.replace(res, file=f.filename or 'upload')
    return jsonify(res.to_dict())

@app.get('/report')
def report():
    settings = _settings()
    rep = verify_all(settings.search_roots, timeout=settings.parse_timeout)
    c = conclude(rep)
    body = rep.to_dict()
    body.update({
        'succeeded': rep.succeeded,
        'conclusion': {'status': c.status, 'headline': c.headline, 'lines': list(c.lines)},
        'recommendations': recommendations(rep),
    })
    return jsonify(body)

INDEX_HTML = """<!doctype html>
<html lang=\"en\">
<head>
<meta charset=\"utf-8\">
<title>TDX Verifier</title>
<style>
  body { font-family: system-ui, -apple-system, Segoe UI, Roboto, sans-serif; margin: 2rem; }
  pre { background:#0d1420; color:#b8c7e0; padding:12px; border-radius:8px; overflow:auto; }
</style>
</head>
<body>
<h1>TDX Verifier</h1>
<form id=\"form\">
  <select name=\"kind\">
    <option value=\"evidence\">Evidence</option>
    <option value=\"token\">Token</option>
    <option value=\"quote\">Quote</option>
  </select>
  <input name=\"file\" type=\"file\" />
  <button type=\"submit\">Verify</button>
</form>
<pre id=\"out\"></pre>
<script>
document.getElementById('form').addEventListener('submit', async e => {
  e.preventDefault();
  const r = await fetch('/verify', { method: 'POST', body: new FormData(e.target) });
  document.getElementById('out').textContent = JSON.stringify(await r.json(), null, 2);
});
</script>
</body>
</html>"""

if __name__ == '__main__':
    app.run(debug=True)
