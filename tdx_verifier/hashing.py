import hashlib

def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

def hex_preview(data: bytes, length: int = 32) -> str:
    return data[:length].hex()
