"""
Utility functions for the complexity scanner.
"""


def is_binary_file(file_path: str) -> bool:
    """Check if a file looks binary from its first kilobyte."""
    with open(file_path, 'rb') as f:
        chunk = f.read(1024)
    if not chunk:
        return False
    if b'\x00' in chunk:
        return True
    # Check for high proportion of non-text bytes
    text_chars = bytearray({7, 8, 9, 10, 12, 13, 27} | set(range(0x20, 0x100)) - {0x7f})
    non_text = sum(1 for byte in chunk if byte not in text_chars)
    return non_text / len(chunk) > 0.3


def truncate_string(s: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate a string to a maximum length."""
    if len(s) <= max_length:
        return s
    return s[:max_length - len(suffix)] + suffix
