import uuid


def generate_code(prefix=""):
    """Short human-readable reference, e.g. C-3F9A1B2C."""
    return prefix + uuid.uuid4().hex[:8].upper()
