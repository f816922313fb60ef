"""
Arena model for the tactical decision engine.

Subpackages:
- core: types, decisions, validation, errors
- mechanics: combat model (pure functions)
- entities: static profiles and per-turn agent state
- world: board and turn snapshot
"""
