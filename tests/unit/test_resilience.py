"""Unit tests for the read/write error policies."""

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from app.core.exceptions import NotFoundError, StoreError
from app.core.resilience import fallback_on_error, gather_with_fallback, translate_store_errors


class TestFallbackOnError:
    """Test read path fallback."""

    @pytest.mark.asyncio
    async def test_store_failure_returns_default(self):
        @fallback_on_error(default=list)
        async def read():
            raise SQLAlchemyError("connection lost")

        assert await read() == []

    @pytest.mark.asyncio
    async def test_success_passes_through(self):
        @fallback_on_error(default=list)
        async def read():
            return [1, 2]

        assert await read() == [1, 2]

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self):
        @fallback_on_error(default=list)
        async def read():
            raise ValueError("bug")

        with pytest.raises(ValueError):
            await read()


class TestTranslateStoreErrors:
    """Test write path error translation."""

    @pytest.mark.asyncio
    async def test_store_failure_becomes_store_error(self):
        @translate_store_errors("save review")
        async def write():
            raise OperationalError("UPDATE reviews", {}, Exception("disk full"))

        with pytest.raises(StoreError) as exc_info:
            await write()

        assert exc_info.value.status_code == 503
        assert exc_info.value.code == "STORE_FAILURE"
        assert exc_info.value.error_message == "Failed to save review"

    @pytest.mark.asyncio
    async def test_domain_errors_propagate(self):
        @translate_store_errors("save review")
        async def write():
            raise NotFoundError("Book", "abc")

        with pytest.raises(NotFoundError):
            await write()


class TestGatherWithFallback:
    """Test concurrent fan-out with partial failure."""

    @pytest.mark.asyncio
    async def test_failed_branch_gets_default(self):
        async def ok():
            return ["book"]

        async def broken():
            raise RuntimeError("branch down")

        results = await gather_with_fallback(
            {
                "reading": (ok, list),
                "trending": (broken, list),
                "stats": (broken, dict),
            }
        )

        assert results == {"reading": ["book"], "trending": [], "stats": {}}

    @pytest.mark.asyncio
    async def test_all_branches_succeed(self):
        async def one():
            return 1

        async def two():
            return 2

        assert await gather_with_fallback({"a": (one, int), "b": (two, int)}) == {"a": 1, "b": 2}
