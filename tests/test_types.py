"""Tests for hostcast type definitions."""

from hostcast.types import (
    DEFAULT_FORKS,
    DEFAULT_TIMEOUT,
    DispatchResult,
    OpaqueResult,
    Options,
    StructuredResult,
)


class TestOptions:
    """Tests for Options dataclass."""

    def test_defaults(self):
        options = Options()
        assert options.forks == DEFAULT_FORKS
        assert options.timeout == DEFAULT_TIMEOUT
        assert options.selector == {}
        assert options.confirmed is False
        assert options.output_format == "text"

    def test_selectors_not_shared(self):
        first, second = Options(), Options()
        first.selector["pool"] = "web"
        assert second.selector == {}

    def test_describe_selector(self):
        options = Options(selector={"status": "allocated", "pool": "web"})
        assert options.describe_source() == "status:allocated pool:web"

    def test_describe_stdin(self):
        assert Options(input=True, selector={"pool": "web"}).describe_source() == "stdin"


class TestResults:
    """Tests for result variants."""

    def test_structured_output(self):
        result = StructuredResult(code=0, primary="out", secondary="err")
        assert result.output == "outerr"
        assert result.to_dict() == {"code": 0, "stdout": "out", "stderr": "err"}

    def test_opaque_to_dict(self):
        assert OpaqueResult(raw=["x"], text="['x']").to_dict() == {"raw": ["x"]}

    def test_dispatch_result_empty(self):
        assert DispatchResult().is_empty
        assert not DispatchResult(job_id="1").is_empty
        assert len(DispatchResult(hosts={"a": OpaqueResult("x", "x")})) == 1
