"""
LCDM status code table.

Maps the raw status byte reported by the device to an OperationStatus
together with the manufacturer's description of the condition.
"""

from typing import Final, Optional

from .core.value_objects import OperationStatus


STATUS_CODES: Final[dict[int, tuple[OperationStatus, str]]] = {
    0x30: (OperationStatus.GOOD, "Good"),
    0x31: (OperationStatus.NORMAL_STOP, "Normal stop"),
    0x32: (OperationStatus.PICKUP_ERROR, "Pickup error"),
    0x33: (OperationStatus.JAM, "JAM at CHK1,2 Sensor"),
    0x34: (OperationStatus.OVERFLOW_BILL, "Overflow bill"),
    0x35: (OperationStatus.JAM, "JAM at EXIT Sensor or EJT Sensor"),
    0x36: (OperationStatus.JAM, "JAM at DIV Sensor"),
    0x37: (OperationStatus.DEVICE_ERROR, "Undefined command"),
    0x38: (OperationStatus.BILL_END, "Upper Bill-End"),
    0x3A: (OperationStatus.COUNTING_ERROR, "Counting Error (between CHK3,4 Sensor and DIV Sensor)"),
    0x3B: (OperationStatus.NOTE_REQUEST_ERROR, "Note request error"),
    0x3C: (OperationStatus.COUNTING_ERROR, "Counting Error (between DIV Sensor and EJT Sensor)"),
    0x3D: (OperationStatus.COUNTING_ERROR, "Counting Error (between EJT Sensor and EXIT Sensor)"),
    0x3F: (OperationStatus.DEVICE_ERROR, "Reject Tray is not recognized"),
    0x40: (OperationStatus.BILL_END, "Lower Bill-End"),
    0x41: (OperationStatus.DEVICE_ERROR, "Motor Stop"),
    0x42: (OperationStatus.JAM, "JAM at Div Sensor"),
    0x43: (OperationStatus.TIMEOUT, "Timeout (From DIV Sensor to EJT Sensor)"),
    0x44: (OperationStatus.OVER_REJECT, "Over Reject"),
    0x45: (OperationStatus.DEVICE_ERROR, "Upper Cassette is not recognized"),
    0x46: (OperationStatus.DEVICE_ERROR, "Lower Cassette is not recognized"),
    0x47: (OperationStatus.TIMEOUT, "Dispensing timeout"),
    0x48: (OperationStatus.JAM, "JAM at EJT Sensor"),
    0x49: (OperationStatus.DEVICE_ERROR, "Diverter solenoid or SOL Sensor error"),
    0x4A: (OperationStatus.DEVICE_ERROR, "SOL Sensor error"),
    0x4C: (OperationStatus.JAM, "JAM at CHK3,4 Sensor"),
    0x4E: (OperationStatus.JAM, "Purge error (Jam at Div Sensor)"),
}


def lookup_status(code: int) -> Optional[OperationStatus]:
    """
    Map a raw status byte to an operation status.

    Args:
        code: Status byte from a device response.

    Returns:
        The mapped status, or None if the byte is not documented.
    """
    entry = STATUS_CODES.get(code)
    if entry is None:
        return None
    return entry[0]


def get_status_description(code: int) -> str:
    """Get the manufacturer's description of a raw status byte."""
    entry = STATUS_CODES.get(code)
    if entry is None:
        return f"Unknown status (0x{code:02X})"
    return entry[1]
