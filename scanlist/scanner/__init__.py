"""
==============================================================================
Scanner Package - Barcode Detection
==============================================================================

Barcode scanning with OpenCV and pyzbar.

Classes:
--------
- BarcodeScanner: Scan adapter emitting filtered code strings
- CameraError: Raised when the camera device is unavailable

==============================================================================
"""

from .core import BarcodeScanner, CameraError, decode_base64_frame

__all__ = ["BarcodeScanner", "CameraError", "decode_base64_frame"]
