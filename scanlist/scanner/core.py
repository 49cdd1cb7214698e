"""
==============================================================================
Barcode Scanner Core Module
==============================================================================

Scan adapter turning camera frames into decoded code strings.

Features:
---------
- Frame decoding with pyzbar (1D and 2D symbologies)
- Validity filter: codes shorter than 3 characters or containing "." are
  never emitted
- Base64 frame decoding for frames sent over the WebSocket
- Live camera loop with an on-code callback
- Visual feedback with colored bounding boxes:
  - GREEN: Code passed the filter
  - RED: Code rejected by the filter

Error Policy:
------------
"Nothing detected" is the normal state of most frames and is silent.
Per-frame decode failures are logged and the frame is skipped. A camera
that cannot be opened raises CameraError once.

==============================================================================
"""

from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path
from typing import Callable, List, Optional

import cv2
import numpy as np
from pyzbar.pyzbar import decode

from scanlist.utils.validators import CodeValidator


# Module logger
logger = logging.getLogger(__name__)


class CameraError(RuntimeError):
    """Raised when the camera device cannot be used."""


# =============================================================================
# COLOR CONSTANTS (BGR format for OpenCV)
# =============================================================================

class ScannerColors:
    """Color constants for detection visualization (BGR)."""

    GREEN = (0, 255, 0)
    RED = (0, 0, 255)
    TEXT_BLACK = (0, 0, 0)
    TEXT_WHITE = (255, 255, 255)


def decode_base64_frame(data: str) -> Optional[np.ndarray]:
    """
    Decode a base64 image (optionally a data: URL) into an OpenCV frame.

    Returns:
        BGR image, or None if the payload is not a decodable image
    """
    if not data:
        return None

    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]

    try:
        img_data = base64.b64decode(data)
    except (binascii.Error, ValueError):
        return None

    nparr = np.frombuffer(img_data, np.uint8)
    if nparr.size == 0:
        return None
    return cv2.imdecode(nparr, cv2.IMREAD_COLOR)


class BarcodeScanner:
    """
    Frame-to-code scan adapter.

    Example:
        >>> scanner = BarcodeScanner()
        >>> codes = scanner.codes_in_frame(frame)
        >>> scanner.scan_camera_live(on_code=print, duration_seconds=10)
    """

    def __init__(
        self,
        camera_index: int = 0,
        validator: Optional[CodeValidator] = None
    ) -> None:
        """
        Initialize scanner instance.

        Args:
            camera_index: Camera device index (0 = default)
            validator: Code filter (CodeValidator by default)
        """
        self._camera_index = camera_index
        self._validator = validator or CodeValidator()
        self._cap = None

        logger.debug(f"Scanner created (camera {camera_index})")

    # =========================================================================
    # FRAME PROCESSING METHODS
    # =========================================================================

    def process_frame(self, frame: np.ndarray, draw: bool = False) -> List[dict]:
        """
        Decode every symbol in a frame.

        Args:
            frame: OpenCV image (numpy array)
            draw: If True, draw colored boxes on the frame

        Returns:
            Detection dictionaries: code, type, valid, reason, rect
        """
        if frame is None or frame.size == 0:
            return []

        try:
            barcodes = decode(frame)
        except Exception as e:
            logger.error(f"Decode error: {e}")
            return []

        detections = []

        for barcode in barcodes:
            try:
                code = barcode.data.decode("utf-8")
            except UnicodeDecodeError:
                logger.debug("Skipping non UTF-8 payload")
                continue

            is_valid, reason = self._validator.validate(code)
            rect = {
                "x": barcode.rect.left,
                "y": barcode.rect.top,
                "width": barcode.rect.width,
                "height": barcode.rect.height
            }

            detections.append({
                "code": code,
                "type": barcode.type,
                "valid": is_valid,
                "reason": reason,
                "rect": rect
            })

            if draw:
                self._draw_colored_box(
                    frame, barcode,
                    label=code if is_valid else f"✗ {code}",
                    color=ScannerColors.GREEN if is_valid else ScannerColors.RED
                )

        return detections

    def codes_in_frame(self, frame: np.ndarray) -> List[str]:
        """Get the distinct valid codes in a frame, in detection order."""
        codes: List[str] = []
        for detection in self.process_frame(frame):
            if detection["valid"] and detection["code"] not in codes:
                codes.append(detection["code"])
        return codes

    def codes_in_base64(self, data: str) -> List[str]:
        """Decode a base64 frame and return its valid codes."""
        frame = decode_base64_frame(data)
        if frame is None:
            return []
        return self.codes_in_frame(frame)

    def scan_image(self, image_path: Path) -> List[str]:
        """Scan valid codes from a static image file."""
        if not image_path.exists():
            logger.error(f"Image not found: {image_path}")
            return []

        frame = cv2.imread(str(image_path))
        if frame is None:
            logger.error(f"Could not read image: {image_path}")
            return []

        return self.codes_in_frame(frame)

    # =========================================================================
    # DRAWING
    # =========================================================================

    def _draw_colored_box(
        self,
        frame: np.ndarray,
        barcode,
        label: str,
        color: tuple,
        thickness: int = 3
    ) -> None:
        """Draw a bounding box with a filled label above it."""
        try:
            x, y, w, h = barcode.rect
            cv2.rectangle(frame, (x, y), (x + w, y + h), color, thickness)

            font = cv2.FONT_HERSHEY_SIMPLEX
            (text_w, text_h), _ = cv2.getTextSize(label, font, 0.6, 2)

            label_y = y - 10 if y - 10 > text_h else y + h + text_h + 10
            cv2.rectangle(
                frame,
                (x, label_y - text_h - 5),
                (x + text_w + 10, label_y + 5),
                color,
                -1
            )

            text_color = ScannerColors.TEXT_BLACK if color == ScannerColors.GREEN else ScannerColors.TEXT_WHITE
            cv2.putText(frame, label, (x + 5, label_y), font, 0.6, text_color, 2)

        except Exception as e:
            logger.error(f"Draw error: {e}")

    # =========================================================================
    # CAMERA METHODS
    # =========================================================================

    def scan_camera_live(
        self,
        on_code: Callable[[str], None],
        duration_seconds: int = 0,
        display: bool = True,
        window_name: str = "Barcode Scanner"
    ) -> int:
        """
        Live camera scanning; calls on_code for each newly seen valid code.

        A code is emitted once per run even if it stays in view.

        Args:
            on_code: Callback receiving each decoded code
            duration_seconds: How long to scan (0 = until 'q')
            display: Show the annotated frames in a window
            window_name: OpenCV window name

        Returns:
            Number of codes emitted

        Raises:
            CameraError: If the camera cannot be opened
        """
        self._cap = cv2.VideoCapture(self._camera_index)

        if not self._cap.isOpened():
            self._cap = None
            raise CameraError(f"Cannot open camera {self._camera_index}")

        logger.info("📷 Starting live scan (press 'q' to quit)")

        emitted: List[str] = []
        start_time = cv2.getTickCount()

        try:
            while True:
                ret, frame = self._cap.read()
                if not ret:
                    logger.warning("Failed to read frame")
                    break

                for detection in self.process_frame(frame, draw=display):
                    code = detection["code"]
                    if detection["valid"] and code not in emitted:
                        emitted.append(code)
                        on_code(code)

                if display:
                    cv2.imshow(window_name, frame)
                    if cv2.waitKey(1) & 0xFF == ord('q'):
                        logger.info("User pressed 'q' - stopping scan")
                        break

                if duration_seconds > 0:
                    elapsed = (cv2.getTickCount() - start_time) / cv2.getTickFrequency()
                    if elapsed >= duration_seconds:
                        break
        finally:
            self.close()

        logger.info(f"📊 Codes emitted: {len(emitted)}")
        return len(emitted)

    def close(self) -> None:
        """Release the camera and any windows."""
        if self._cap:
            self._cap.release()
            self._cap = None
        try:
            cv2.destroyAllWindows()
        except cv2.error:
            # Headless builds have no window support
            pass
        logger.debug("Scanner closed")
