"""Image loading into embeddable data URLs."""

from .loader import data_url_mime_type, decode_data_url, load_image

__all__ = ["data_url_mime_type", "decode_data_url", "load_image"]
