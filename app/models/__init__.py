# app/models/__init__.py
# Loads every model so relationship("...") names resolve on first mapper use.
import app.models.portal        # noqa: F401
import app.models.user          # noqa: F401
import app.models.membership    # noqa: F401
import app.models.tokens        # noqa: F401

__all__: list[str] = []
