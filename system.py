# system.py
from __future__ import annotations
import subprocess
from environment import KeyboardMapping
from logger import log


def set_keyboard_layout(kmap: KeyboardMapping) -> None:
    """Switch the console keymap of the live system.

    Raises OSError if ``loadkeys`` is missing and CalledProcessError if it
    rejects the mapping.
    """
    log.info("Running: loadkeys -C /dev/tty1 %s", kmap.id)
    subprocess.run(
        ["loadkeys", "-C", "/dev/tty1", kmap.id],
        check=True, capture_output=True, text=True,
    )
    log.info("Keyboard layout set to %s (%s)", kmap.id, kmap.name)
