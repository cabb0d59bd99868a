import pytest

from apps.core.exceptions import ErrorKind, InvalidPrice, MarketplaceError, NotFound
from apps.core.utils.action_result import ActionResult, service_action


@service_action
def find_thing(thing_id):
    if thing_id is None:
        raise NotFound("Thing not found")
    if thing_id == "boom":
        raise RuntimeError("storage is down")
    return {"id": thing_id}


class TestServiceAction:
    def test_success_is_wrapped(self):
        result = find_thing("a")

        assert result == ActionResult(success=True, data={"id": "a"})

    def test_business_errors_become_failed_results(self):
        result = find_thing(None)

        assert result.success is False
        assert result.error == ErrorKind.NOT_FOUND
        assert result.message == "Thing not found"

    def test_unexpected_errors_propagate(self):
        with pytest.raises(RuntimeError):
            find_thing("boom")


class TestUnwrap:
    def test_unwrap_success(self):
        assert ActionResult.ok(5).unwrap() == 5

    def test_unwrap_failure_raises_matching_error(self):
        with pytest.raises(InvalidPrice) as excinfo:
            ActionResult.fail(ErrorKind.INVALID_PRICE, "too expensive").unwrap()

        assert excinfo.value.message == "too expensive"

    def test_unknown_kind_falls_back_to_base_error(self):
        with pytest.raises(MarketplaceError):
            ActionResult.fail("SOMETHING_ELSE", "odd").unwrap()
