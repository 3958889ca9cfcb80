"""
Tests for session state transitions and the single-flight guard.
"""
import asyncio

import pytest

from tryon.core.exceptions import (
    NoImageProduced,
    SessionBusy,
    SessionNotFound,
    SessionNotReady,
    UnknownCategory,
)
from tryon.services import session as sessions
from tryon.services.catalogue import Category
from tryon.services.genai import ResponsePart
from tryon.services.session import SessionPhase, TryOnSession


@pytest.fixture
def ready_session(stub, model_image, item_image):
    s = TryOnSession(category=Category.HATS, service=stub)
    s.set_model_image(model_image)
    s.set_item_image(item_image)
    return s


class TestTransitions:
    def test_new_session_is_idle_and_empty(self):
        s = TryOnSession()
        assert s.active_category == Category.SHOES
        assert s.phase == SessionPhase.IDLE
        assert s.model_image is None and s.item_image is None
        assert not s.busy

    @pytest.mark.parametrize("first", ["model", "item"])
    def test_upload_order_does_not_matter(self, first, model_image, item_image):
        s = TryOnSession()
        images = {"model": model_image, "item": item_image}
        second = "item" if first == "model" else "model"

        s.set_image(first, images[first])
        assert s.phase == SessionPhase.IDLE
        s.set_image(second, images[second])
        assert s.phase == SessionPhase.READY

    def test_removing_an_image_leaves_ready(self, ready_session, item_image):
        assert ready_session.set_model_image(None)
        assert ready_session.phase == SessionPhase.IDLE
        assert ready_session.item_image == item_image

    def test_reupload_replaces_the_slot(self, ready_session, model_image):
        from tryon.models.image import EncodedImage
        other = EncodedImage(data=b"other", content_type="image/png")
        ready_session.set_item_image(other)
        assert ready_session.item_image is other
        assert ready_session.model_image is model_image

    def test_category_switch_clears_images(self, ready_session):
        assert ready_session.select_category("watches")
        assert ready_session.active_category == Category.WATCHES
        assert ready_session.phase == SessionPhase.IDLE
        assert ready_session.model_image is None
        assert ready_session.item_image is None
        assert not ready_session.busy

    def test_category_switch_clears_status_and_result(self, ready_session):
        asyncio.run(ready_session.request_generation())
        assert ready_session.last_result is not None

        ready_session.select_category(Category.BAGS)

        assert ready_session.status == ""
        assert ready_session.last_result is None

    def test_unknown_category_keeps_state(self, ready_session):
        with pytest.raises(UnknownCategory):
            ready_session.select_category("capes")
        assert ready_session.active_category == Category.HATS
        assert ready_session.phase == SessionPhase.READY

    def test_disabled_accessories_rejected(self, accessories_disabled):
        s = TryOnSession()
        with pytest.raises(UnknownCategory, match="disabled"):
            s.select_category("glasses")
        assert s.select_category("suits")


class TestGeneration:
    def test_success_keeps_images(self, ready_session, model_image, item_image):
        result = asyncio.run(ready_session.request_generation())

        assert result.succeeded
        assert result.image.data == b"ABC"
        assert ready_session.phase == SessionPhase.READY
        assert ready_session.model_image == model_image
        assert ready_session.item_image == item_image
        assert ready_session.status == "Generation complete!"
        assert ready_session.last_result is result

    def test_no_image_produced_returns_to_idle_with_images(self, make_stub, model_image, item_image):
        s = TryOnSession(service=make_stub(parts=[ResponsePart(text="sorry")]))
        s.set_model_image(model_image)
        s.set_item_image(item_image)

        result = asyncio.run(s.request_generation())

        assert isinstance(result.error, NoImageProduced)
        assert not s.busy
        assert s.model_image == model_image
        assert s.item_image == item_image
        assert s.status.startswith("Error: Could not find a generated image")

    def test_failure_allows_retry(self, make_stub, model_image, item_image):
        failing = make_stub(analysis_error=RuntimeError("503 unavailable"))
        s = TryOnSession(service=failing)
        s.set_model_image(model_image)
        s.set_item_image(item_image)

        first = asyncio.run(s.request_generation())
        assert not first.succeeded
        assert s.status == "Error: 503 unavailable"

        healthy = make_stub()
        second = asyncio.run(s.request_generation(service=healthy))
        assert second.succeeded
        assert len(healthy.analyze_calls) == 1

    def test_not_ready_is_a_no_op(self, stub, model_image):
        s = TryOnSession(service=stub)
        s.set_model_image(model_image)

        assert asyncio.run(s.request_generation()) is None
        assert stub.analyze_calls == []
        with pytest.raises(SessionNotReady):
            s.ensure_ready()

    def test_concurrent_triggers_make_one_call_pair(self, make_stub, model_image, item_image):
        stub = make_stub(delay=0.01)
        s = TryOnSession(service=stub)
        s.set_model_image(model_image)
        s.set_item_image(item_image)

        async def trigger_twice():
            return await asyncio.gather(s.request_generation(), s.request_generation())

        first, second = asyncio.run(trigger_twice())

        assert first.succeeded
        assert second is None
        assert len(stub.analyze_calls) == 1
        assert len(stub.edit_calls) == 1

    def test_commands_while_busy_are_no_ops(self, make_stub, model_image, item_image):
        stub = make_stub(delay=0.01)
        s = TryOnSession(category=Category.WATCHES, service=stub)
        s.set_model_image(model_image)
        s.set_item_image(item_image)

        async def scenario():
            task = asyncio.create_task(s.request_generation())
            await asyncio.sleep(0)
            observed = {
                "phase": s.phase,
                "status": s.status,
                "switch": s.select_category("hats"),
                "clear": s.set_item_image(None),
            }
            with pytest.raises(SessionBusy):
                s.ensure_ready()
            await task
            return observed

        observed = asyncio.run(scenario())

        assert observed["phase"] == SessionPhase.BUSY
        assert observed["status"] == "Analyzing model image..."
        assert observed["switch"] is False
        assert observed["clear"] is False
        assert s.active_category == Category.WATCHES
        assert s.item_image == item_image
        assert s.phase == SessionPhase.READY

    def test_switch_to_disabled_category_while_busy_is_a_no_op(
        self, ready_session, model_image, accessories_disabled,
    ):
        ready_session.busy = True
        assert ready_session.select_category("glasses") is False
        assert ready_session.select_category("not-a-category") is False
        assert ready_session.active_category == Category.HATS
        assert ready_session.model_image == model_image

    def test_busy_flag_cleared_when_service_raises_unexpectedly(self, model_image, item_image, monkeypatch):
        async def boom(*args, **kwargs):
            raise RuntimeError("bug")

        monkeypatch.setattr(sessions.tryon, "generate", boom)
        s = TryOnSession()
        s.set_model_image(model_image)
        s.set_item_image(item_image)

        with pytest.raises(RuntimeError):
            asyncio.run(s.request_generation())
        assert not s.busy


class TestSnapshot:
    def test_snapshot_fields(self, ready_session):
        snap = ready_session.snapshot()
        assert snap["category"] == "hats"
        assert snap["title"] == "Virtual Hat/Cap Try-On"
        assert snap["phase"] == "ready"
        assert snap["can_generate"] is True
        assert snap["has_result"] is False


class TestRegistry:
    def test_create_get_remove(self):
        s = sessions.create_session("pants")
        assert sessions.get_session(s.session_id) is s
        sessions.remove_session(s.session_id)
        with pytest.raises(SessionNotFound):
            sessions.get_session(s.session_id)

    def test_ids_are_unique(self):
        a = sessions.create_session()
        b = sessions.create_session()
        assert a.session_id != b.session_id

    def test_remove_unknown(self):
        with pytest.raises(SessionNotFound):
            sessions.remove_session("missing")

    def test_create_with_disabled_category(self, accessories_disabled):
        with pytest.raises(UnknownCategory):
            sessions.create_session("hats")

    def test_get_marks_session_recently_used(self, monkeypatch):
        monkeypatch.setattr(sessions.get_settings(), "max_sessions", 2)
        first = sessions.create_session()
        second = sessions.create_session()
        sessions.get_session(first.session_id)

        third = sessions.create_session()

        assert sessions.get_session(first.session_id) is first
        assert sessions.get_session(third.session_id) is third
        with pytest.raises(SessionNotFound):
            sessions.get_session(second.session_id)


class TestRegistryLimit:
    def test_oldest_idle_session_evicted_at_limit(self, monkeypatch):
        monkeypatch.setattr(sessions.get_settings(), "max_sessions", 3)
        created = [sessions.create_session() for _ in range(5)]

        assert len(sessions._sessions) == 3
        for s in created[:2]:
            with pytest.raises(SessionNotFound):
                sessions.get_session(s.session_id)
        for s in created[2:]:
            assert sessions.get_session(s.session_id) is s

    def test_busy_sessions_are_never_evicted(self, monkeypatch):
        monkeypatch.setattr(sessions.get_settings(), "max_sessions", 2)
        busy = sessions.create_session()
        busy.busy = True
        idle = sessions.create_session()

        fresh = sessions.create_session()

        assert sessions.get_session(busy.session_id) is busy
        assert sessions.get_session(fresh.session_id) is fresh
        with pytest.raises(SessionNotFound):
            sessions.get_session(idle.session_id)

    def test_all_busy_still_admits_new_session(self, monkeypatch):
        monkeypatch.setattr(sessions.get_settings(), "max_sessions", 1)
        busy = sessions.create_session()
        busy.busy = True

        fresh = sessions.create_session()

        assert sessions.get_session(busy.session_id) is busy
        assert sessions.get_session(fresh.session_id) is fresh
