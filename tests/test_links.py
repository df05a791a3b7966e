import itertools

import pytest

from linkgate.services.links import InvalidTemplate, LinkRegistry

PAGES = ('welcome.html', 'invite.html', 'download.html')


def test_create_returns_fresh_ids_that_look_up_to_the_page():
    reg = LinkRegistry(PAGES)
    seen = set()
    for page in PAGES * 20:
        path_id = reg.create(page)
        assert path_id not in seen
        seen.add(path_id)
        assert reg.lookup(path_id) == page
    assert len(reg) == len(seen)


def test_path_ids_are_16_hex_chars():
    path_id = LinkRegistry(PAGES).create('welcome.html')
    assert len(path_id) == 16
    int(path_id, 16)


def test_invalid_template_leaves_registry_unchanged():
    reg = LinkRegistry(PAGES)
    reg.create('welcome.html')
    with pytest.raises(InvalidTemplate) as exc:
        reg.create('unknown.html')
    assert exc.value.landing_page == 'unknown.html'
    assert len(reg) == 1


@pytest.mark.parametrize('bad', [None, '', 42, ['welcome.html']])
def test_non_string_or_empty_pages_are_rejected(bad):
    with pytest.raises(InvalidTemplate):
        LinkRegistry(PAGES).create(bad)


def test_lookup_unknown_is_none():
    assert LinkRegistry(PAGES).lookup('deadbeefdeadbeef') is None


def test_colliding_id_is_regenerated():
    ids = itertools.chain(['aaaa', 'aaaa', 'bbbb'])
    reg = LinkRegistry(PAGES, id_gen=lambda n: next(ids))
    assert reg.create('welcome.html') == 'aaaa'
    assert reg.create('invite.html') == 'bbbb'
    assert reg.lookup('aaaa') == 'welcome.html'
