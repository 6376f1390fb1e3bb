from .io import load_image_async, write_bytes_async


__all__ = ["load_image_async", "write_bytes_async"]
