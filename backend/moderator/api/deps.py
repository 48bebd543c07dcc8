from __future__ import annotations

import threading

from moderator.engine.game_engine import ModeratorEngine

engine = ModeratorEngine()
# Routes run in the threadpool and the ticker on the event loop; both take this.
engine_lock = threading.RLock()
