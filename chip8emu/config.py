from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_IPS = 700
DEFAULT_TONE_HZ = 440.0
DEFAULT_BEEP_MS = 100
DEFAULT_SCALE = 15


@dataclass
class Quirks:
    """
    Compatibility toggles for the opcodes historical interpreters disagree on.
    All off means original COSMAC VIP behavior for shifts and BNNN.
    """
    shift_uses_vy: bool = False           # 8XY6/8XYE shift Vy into Vx
    jump_uses_vx: bool = False            # BXNN jumps to XNN + VX instead of NNN + V0
    store_increments_index: bool = False  # FX55/FX65 leave I = I + X + 1
    logic_resets_vf: bool = False         # 8XY1/8XY2/8XY3 clear VF


@dataclass
class Config:
    ips: int = DEFAULT_IPS
    tone_hz: float = DEFAULT_TONE_HZ
    beep_ms: int = DEFAULT_BEEP_MS
    scale: int = DEFAULT_SCALE
    mute: bool = False
    quirks: Quirks = field(default_factory=Quirks)

    def __post_init__(self):
        if self.ips <= 0:
            raise ValueError(f"instructions per second must be positive, got {self.ips}")
        if self.tone_hz <= 0:
            raise ValueError(f"tone frequency must be positive, got {self.tone_hz}")
        if self.beep_ms <= 0:
            raise ValueError(f"beep duration must be positive, got {self.beep_ms}")
        if self.scale < 1:
            raise ValueError(f"scale must be at least 1, got {self.scale}")
