"""Library loan ledger package root.

Layers: ``db`` (engine, ORM models, repositories), ``services`` (catalog,
ledger, sessions, access gate, reporting), ``routes`` (Flask blueprints) and
``startup`` (application factory). The factory is imported lazily so that
``library_app.config`` and ``library_app.utils`` stay importable on their own.
"""


def create_app(*args, **kwargs):
    from library_app.startup.wiring import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = ["create_app"]
