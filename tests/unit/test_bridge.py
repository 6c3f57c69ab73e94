"""
Unit tests for the pagination bridge.

Tests query parsing, the runtime capability check and the module-level
count/get_page/get_page_with_next compositions.
"""

import asyncio

import pytest
from starlette.datastructures import QueryParams

from pagantic import (
    CapabilityNotSupportedError,
    PageRequest,
    PageResult,
    SupportsPagination,
    count,
    get_page,
    get_page_from_query,
    get_page_with_next,
    parse_page_request,
    with_capability,
)


@pytest.mark.unit
class TestParsePageRequest:
    def test_reads_both_values(self) -> None:
        assert parse_page_request({"page": "46", "pagesize": "5"}) == PageRequest(46, 5)

    def test_empty_map_uses_defaults(self) -> None:
        assert parse_page_request({}) == PageRequest(1, 100)

    def test_unparseable_page_falls_back(self) -> None:
        assert parse_page_request({"page": "abc"}) == PageRequest(1, 100)

    @pytest.mark.parametrize(
        "raw", ["", " ", "-4", "1.5", "0x10", "1_000", "seven", "٤٦", "４６"]
    )
    def test_malformed_values_fall_back(self, raw) -> None:
        assert parse_page_request({"page": raw, "pagesize": raw}) == PageRequest()

    def test_very_long_digit_string_falls_back(self) -> None:
        assert parse_page_request({"page": "9" * 5000, "pagesize": "9" * 5000}) == PageRequest()

    def test_values_beyond_unsigned_32_bit_fall_back(self) -> None:
        assert parse_page_request({"page": str(2**32), "pagesize": "5"}) == PageRequest(1, 5)

    def test_largest_unsigned_32_bit_value_is_accepted(self) -> None:
        assert parse_page_request({"page": str(2**32 - 1)}).page == 2**32 - 1

    def test_leading_zeros_are_accepted(self) -> None:
        assert parse_page_request({"page": "0" * 5000 + "7"}) == PageRequest(7, 100)

    @pytest.mark.parametrize("raw", [5, 2.0, b"5", object()])
    def test_non_string_values_fall_back(self, raw) -> None:
        assert parse_page_request({"page": raw}) == PageRequest()

    def test_non_string_first_of_many_falls_back(self) -> None:
        assert parse_page_request({"page": [b"5", "6"]}) == PageRequest()

    def test_zero_falls_back(self) -> None:
        assert parse_page_request({"page": "0", "pagesize": "0"}) == PageRequest()

    def test_surrounding_whitespace_is_accepted(self) -> None:
        assert parse_page_request({"page": " 3 ", "pagesize": "7\n"}) == PageRequest(3, 7)

    def test_keys_are_case_sensitive(self) -> None:
        assert parse_page_request({"Page": "3", "PageSize": "7"}) == PageRequest()

    def test_first_of_multiple_values_is_used(self) -> None:
        assert parse_page_request({"page": ["4", "9"], "pagesize": ["2"]}) == PageRequest(4, 2)

    def test_empty_value_list_falls_back(self) -> None:
        assert parse_page_request({"page": []}) == PageRequest()

    def test_starlette_query_params(self) -> None:
        params = QueryParams("page=2&page=9&pagesize=5")
        assert parse_page_request(params) == PageRequest(2, 5)


@pytest.mark.unit
class TestWithCapability:
    def test_returns_capable_source(self, recording_source) -> None:
        source = recording_source()
        assert with_capability(source) is source

    def test_rejects_plain_repository(self, plain_repository) -> None:
        with pytest.raises(CapabilityNotSupportedError) as exc_info:
            with_capability(plain_repository)

        assert exc_info.value.entity_type == "Item"
        assert exc_info.value.capability == "SupportsPagination"
        assert "SupportsPagination" in str(exc_info.value)
        plain_repository.count.assert_not_called()
        plain_repository.get_page.assert_not_called()

    def test_explicit_entity_type_wins(self, plain_repository) -> None:
        with pytest.raises(CapabilityNotSupportedError) as exc_info:
            with_capability(plain_repository, entity_type="Order")
        assert exc_info.value.entity_type == "Order"

    def test_falls_back_to_source_class_name(self) -> None:
        class Untyped:
            pass

        with pytest.raises(CapabilityNotSupportedError) as exc_info:
            with_capability(Untyped())
        assert exc_info.value.entity_type == "Untyped"

    def test_virtual_subclass_is_accepted(self) -> None:
        class LegacySource:
            async def count(self, filter=None):
                return 0

            async def get_page(self, page_request, filter=None):
                return PageResult(request=page_request, results=[])

        SupportsPagination.register(LegacySource)
        source = LegacySource()
        assert with_capability(source) is source


@pytest.mark.unit
class TestUnsupportedSourceFailsImmediately:
    """Errors are raised at call time, before anything is awaited."""

    def test_count(self, plain_repository) -> None:
        with pytest.raises(CapabilityNotSupportedError):
            count(plain_repository)
        plain_repository.count.assert_not_called()

    def test_get_page(self, plain_repository) -> None:
        with pytest.raises(CapabilityNotSupportedError):
            get_page(plain_repository, PageRequest(46, 5))
        plain_repository.get_page.assert_not_called()

    def test_get_page_with_next(self, plain_repository) -> None:
        with pytest.raises(CapabilityNotSupportedError):
            get_page_with_next(plain_repository, PageRequest(), "http://test.test")
        plain_repository.get_page.assert_not_called()

    def test_get_page_from_query(self, plain_repository) -> None:
        with pytest.raises(CapabilityNotSupportedError):
            get_page_from_query(plain_repository, {"page": "2"})
        plain_repository.get_page.assert_not_called()


@pytest.mark.unit
@pytest.mark.asyncio
class TestDelegation:
    async def test_count_calls_source(self, recording_source) -> None:
        source = recording_source(total=4711)
        assert await count(source) == 4711
        assert source.count_calls == [None]

    async def test_filter_is_forwarded_unexamined(self, recording_source) -> None:
        source = recording_source(total=1)

        def only_active(items):
            return items

        await count(source, only_active)
        await get_page(source, PageRequest(1, 1), only_active)

        assert source.count_calls == [only_active]
        assert source.page_calls[0][1] is only_active

    async def test_get_page_calls_source(self, recording_source) -> None:
        source = recording_source(results=["a", "b"])
        result = await get_page(source, PageRequest(46, 5))

        assert result.page == 46
        assert result.page_size == 5
        assert result.results == ["a", "b"]
        assert source.page_calls == [(PageRequest(46, 5), None)]

    async def test_get_page_with_next_links_full_page(self, recording_source) -> None:
        source = recording_source(results=["a", "b"])
        result = await get_page_with_next(source, PageRequest(123, 2), "http://test.test:111")

        assert result.page == 123
        assert result.page_size == 2
        assert result.results == ["a", "b"]
        assert result.next == "http://test.test:111?page=124&pagesize=2"

    async def test_get_page_with_next_last_page(self, recording_source) -> None:
        source = recording_source(results=[])
        result = await get_page_with_next(source, PageRequest(123, 456), "http://test.test")
        assert result.next is None

    async def test_get_page_from_query(self, recording_source) -> None:
        source = recording_source(results=["a"])
        result = await get_page_from_query(source, {"page": "46", "pagesize": "5"})

        assert result.request == PageRequest(46, 5)
        assert source.page_calls[0][0] == PageRequest(46, 5)

    async def test_source_errors_pass_through(self, recording_source) -> None:
        source = recording_source()

        async def broken(page_request, filter=None):
            raise ConnectionError("store unreachable")

        source.get_page = broken
        with pytest.raises(ConnectionError, match="store unreachable"):
            await get_page(source, PageRequest())

    async def test_cancellation_propagates(self, recording_source) -> None:
        source = recording_source()
        started = asyncio.Event()

        async def never_finishes(page_request, filter=None):
            started.set()
            await asyncio.Event().wait()

        source.get_page = never_finishes
        task = asyncio.create_task(
            get_page_with_next(source, PageRequest(), "http://test.test")  # type: ignore[arg-type]
        )
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
