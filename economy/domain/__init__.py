"""Domain layer (pure logic).

- Keep economy rules, prices and rarity classification here.
- Avoid I/O: no DB sessions, no HTTP/FastAPI, no catalog calls.
- Prefer deterministic functions (time/random passed in as arguments if needed).
"""
