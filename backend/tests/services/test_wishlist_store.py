"""Wishlist store — owned items with add/rename/list/remove."""

from uuid import uuid4

import pytest

from bloxmarket.core.errors import NotFoundError, ValidationError


async def test_add_and_list(repos, alice, bob):
    item = await repos.wishlist.add(alice.id, "Giraffe")
    await repos.wishlist.add(bob.id, "Owl")
    listed = await repos.wishlist.list_by_owner(alice.id)
    assert [i.id for i in listed] == [item.id]
    assert listed[0].item_name == "Giraffe"


async def test_add_blank_name(repos, alice):
    with pytest.raises(ValidationError) as exc:
        await repos.wishlist.add(alice.id, "")
    assert exc.value.field == "item_name"


async def test_add_unknown_owner(repos):
    with pytest.raises(NotFoundError) as exc:
        await repos.wishlist.add(uuid4(), "Owl")
    assert exc.value.resource_type == "Owner"


async def test_rename(repos, alice):
    item = await repos.wishlist.add(alice.id, "Giraffe")
    renamed = await repos.wishlist.rename(item.id, " Mega Giraffe ")
    assert renamed.item_name == "Mega Giraffe"


async def test_rename_unknown_item(repos):
    with pytest.raises(NotFoundError):
        await repos.wishlist.rename(uuid4(), "x")


async def test_remove(repos, alice):
    item = await repos.wishlist.add(alice.id, "Giraffe")
    await repos.wishlist.remove(item.id)
    assert await repos.wishlist.list_by_owner(alice.id) == []

    with pytest.raises(NotFoundError) as exc:
        await repos.wishlist.remove(item.id)
    assert exc.value.resource_type == "Wishlist item"
