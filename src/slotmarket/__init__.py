"""SlotMarket slot lifecycle and reconciliation engine.

Slots are a fixed pool of merchandising positions. Every state change goes
through the pure rules in ``slots.slots_state_machine`` and is persisted by
``slots.slots_guard.TransitionGuard`` with a version-token conditional write.
``reconciler`` expires live listings from wall-clock time and ``slots`` exposes
the reviewer operations over HTTP.

Serve with ``uvicorn --factory src.slotmarket.main:create_app``.
"""
