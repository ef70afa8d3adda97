from __future__ import annotations

from typing import Any, ContextManager, Protocol


class TransactionManager(Protocol):
    """Opens one storage transaction.

    The yielded handle is passed to repository writes as ``tx=`` so they join
    the unit; leaving the block commits, an exception rolls everything back.
    """

    def atomic(self) -> ContextManager[Any]:
        raise NotImplementedError
