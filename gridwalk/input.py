"""Low-level terminal input decoding.

Reads raw bytes from the tty and translates them into normalized key tokens
(``UP``, ``CTRL_LEFT``, ``PAGE_DOWN``, ``F2``, plain characters, ...).
Handles ESC-sequence timing, modifier combos, and multi-byte UTF-8 input.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_MAX_CSI_BYTES = 16
_PENDING_BYTES: list[bytes] = []

_CONTROL_KEYS = {
    b"\x03": "CTRL_C",
    b"\x04": "CTRL_D",
    b"\x15": "CTRL_U",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}

_CSI_FINAL_KEYS = {
    "A": "UP",
    "B": "DOWN",
    "C": "RIGHT",
    "D": "LEFT",
    "H": "HOME",
    "F": "END",
}

_SS3_KEYS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
    b"P": "F1",
    b"Q": "F2",
    b"R": "F3",
    b"S": "F4",
}

_TILDE_KEYS = {
    "1": "HOME",
    "2": "INSERT",
    "3": "DELETE",
    "4": "END",
    "5": "PAGE_UP",
    "6": "PAGE_DOWN",
    "7": "HOME",
    "8": "END",
    "11": "F1",
    "12": "F2",
    "13": "F3",
    "14": "F4",
}

# xterm modifier parameter -> token prefix.
_MODIFIERS = {
    "2": "SHIFT_",
    "3": "ALT_",
    "5": "CTRL_",
    "6": "CTRL_SHIFT_",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _decode_text(fd: int, first: bytes) -> str:
    data = first
    for _ in range(_utf8_length(first[0]) - 1):
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        data += nxt
    return data.decode("utf-8", errors="replace")


def decode_csi(params: str, final: str) -> str | None:
    """Map a CSI ``ESC [ params final`` sequence to a key token."""
    if final == "~":
        key_code, _, modifier = params.partition(";")
        key = _TILDE_KEYS.get(key_code)
        if key is None:
            return None
        return _MODIFIERS.get(modifier, "") + key
    key = _CSI_FINAL_KEYS.get(final)
    if key is None:
        return None
    _, _, modifier = params.partition(";")
    return _MODIFIERS.get(modifier, "") + key


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Return the next key token, or ``""`` on timeout / end of input."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    control = _CONTROL_KEYS.get(ch)
    if control is not None:
        return control

    if ch != b"\x1b":
        return _decode_text(fd, ch)

    # Escape / function key sequences.
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq == b"O":
        seq2 = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if seq2 is None:
            return "ESC"
        return _SS3_KEYS.get(seq2, "ESC")
    if seq != b"[":
        _PENDING_BYTES.append(seq)
        return "ESC"

    params: list[bytes] = []
    while len(params) < _MAX_CSI_BYTES:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return "ESC"
        if 0x40 <= part[0] <= 0x7E:
            token = decode_csi(b"".join(params).decode("ascii", errors="replace"), part.decode("ascii"))
            return token or "ESC"
        params.append(part)
    return "ESC"
