from __future__ import annotations

import hashlib
import platform
import uuid


def compute_device_fingerprint() -> str:
    """Stable opaque token for this host. Correlation only, not a credential."""
    parts = (
        platform.node(),
        platform.system(),
        platform.machine(),
        format(uuid.getnode(), "x"),
    )
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()[:32]
