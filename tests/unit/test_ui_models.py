"""Unit tests for UI data models."""

import pytest

from promptcraft.core.errors import AppError, ErrorKind
from promptcraft.ui.models import GenerationSnapshot, GenerationStatus, Session, UIState


class TestSession:
    """Tests for the explicit session object."""

    def test_starts_logged_out(self):
        session = Session()
        assert session.credential is None
        assert not session.is_authenticated

    def test_login_trims_credential(self):
        session = Session()
        session.login("  sk-user  ")
        assert session.credential == "sk-user"
        assert session.is_authenticated

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_credential_rejected(self, value):
        session = Session()
        with pytest.raises(AppError) as exc_info:
            session.login(value)
        assert exc_info.value.kind == ErrorKind.VALIDATION
        assert not session.is_authenticated

    def test_logout_clears(self):
        session = Session()
        session.login("sk-user")
        session.logout()
        assert session.credential is None

    def test_credential_is_read_only(self):
        session = Session()
        with pytest.raises(AttributeError):
            session.credential = "sk-other"

    def test_repr_hides_credential(self):
        session = Session()
        session.login("sk-secret")
        assert "sk-secret" not in repr(session)


class TestGenerationSnapshot:
    """Tests for GenerationSnapshot."""

    def test_defaults_to_idle(self):
        snapshot = GenerationSnapshot()
        assert snapshot.status == GenerationStatus.IDLE
        assert not snapshot.is_generating

    def test_generating(self):
        assert GenerationSnapshot(status=GenerationStatus.GENERATING).is_generating


class TestUIState:
    """Tests for UIState."""

    def test_new_state_not_initialized(self, ui_state):
        assert not ui_state.is_initialized()
        assert ui_state.reference_images == []

    def test_repr_hides_credential(self, ui_state):
        ui_state.session.login("sk-secret")
        assert "sk-secret" not in repr(ui_state)
        assert "authenticated=True" in repr(ui_state)

    def test_instances_do_not_share_lists(self):
        a, b = UIState(), UIState()
        a.reference_images.append("x")
        assert b.reference_images == []
