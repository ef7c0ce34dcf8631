import pytest

from examdesk.core.exceptions import GenerationInProgressError
from examdesk.services.generation_lock import clear_generation_locks, generation_guard


@pytest.fixture(autouse=True)
def _reset_locks():
    clear_generation_locks()
    yield
    clear_generation_locks()


def test_guard_blocks_second_run_for_same_schedule():
    with generation_guard(kind="duty", school_id=1, exam_schedule_id=5):
        with pytest.raises(GenerationInProgressError) as excinfo:
            with generation_guard(kind="duty", school_id=1, exam_schedule_id=5):
                pass

    assert excinfo.value.status_code == 409
    assert excinfo.value.details == {"kind": "duty", "exam_schedule_id": 5}
    with generation_guard(kind="duty", school_id=1, exam_schedule_id=5):
        pass


def test_guard_keys_are_independent():
    with generation_guard(kind="duty", school_id=1, exam_schedule_id=5):
        with generation_guard(kind="seating", school_id=1, exam_schedule_id=5):
            pass
        with generation_guard(kind="duty", school_id=2, exam_schedule_id=5):
            pass
        with generation_guard(kind="duty", school_id=1, exam_schedule_id=6):
            pass


def test_guard_releases_on_error():
    with pytest.raises(RuntimeError):
        with generation_guard(kind="seating", school_id=3, exam_schedule_id=1):
            raise RuntimeError("boom")

    with generation_guard(kind="seating", school_id=3, exam_schedule_id=1):
        pass
