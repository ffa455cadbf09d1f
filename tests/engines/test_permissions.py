"""Tests for quote edit/delete permissions."""

from uuid import uuid4

import pytest

from fleet_engines.permissions import can_delete_quote, can_edit_quote
from fleet_kernel.domain.quote import Actor, UserRole


def make_actor(role: UserRole = UserRole.USER) -> Actor:
    return Actor(id=uuid4(), name="Teste", role=role)


@pytest.mark.parametrize("check", [can_edit_quote, can_delete_quote])
class TestQuotePermissions:
    def test_creator_is_allowed(self, check):
        actor = make_actor()

        assert check(actor.id, actor)

    def test_other_user_is_denied(self, check):
        assert not check(uuid4(), make_actor())

    def test_guest_is_denied(self, check):
        assert not check(uuid4(), make_actor(UserRole.GUEST))

    @pytest.mark.parametrize("role", [UserRole.MANAGER, UserRole.ADMIN])
    def test_elevated_roles_are_allowed(self, check, role):
        assert check(uuid4(), make_actor(role))

    def test_unknown_creator_only_elevated(self, check):
        assert not check(None, make_actor())
        assert check(None, make_actor(UserRole.ADMIN))
