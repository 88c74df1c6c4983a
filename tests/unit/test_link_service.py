import pytest

from tinylink import crud
from tinylink.exceptions import (
    CodeGenerationError,
    DuplicateCodeError,
    InvalidCodeError,
    InvalidUrlError,
    LinkNotFoundError,
)
from tinylink.services import links as link_service
from tinylink.services import redirect as redirect_service


@pytest.mark.asyncio
async def test_create_normalizes_url_and_generates_code(db):
    link = await link_service.create_short_link(db, "example.com")
    assert link.original_url == "https://example.com"
    assert len(link.code) == 7
    assert link.code.isalnum()


@pytest.mark.asyncio
async def test_create_with_custom_code(db):
    link = await link_service.create_short_link(db, "https://a.com", "  abc123 ")
    assert link.code == "abc123"


@pytest.mark.asyncio
async def test_blank_custom_code_falls_back_to_generated(db):
    link = await link_service.create_short_link(db, "https://a.com", "   ")
    assert len(link.code) == 7


@pytest.mark.asyncio
async def test_invalid_url_is_rejected_before_store(db, monkeypatch):
    async def fail(*args, **kwargs):
        raise AssertionError("store must not be reached")

    monkeypatch.setattr(crud, "create_link", fail)

    with pytest.raises(InvalidUrlError):
        await link_service.create_short_link(db, "   ", "abc123")
    with pytest.raises(InvalidCodeError):
        await link_service.create_short_link(db, "https://a.com", "ab-12")


@pytest.mark.asyncio
async def test_duplicate_custom_code(db):
    await link_service.create_short_link(db, "https://a.com", "abc123")
    with pytest.raises(DuplicateCodeError):
        await link_service.create_short_link(db, "https://b.com", "abc123")


@pytest.mark.asyncio
async def test_generated_code_collision_is_retried(db, monkeypatch):
    await crud.create_link(db, "taken01", "https://a.com")
    codes = iter(["taken01", "taken01", "fresh01"])
    monkeypatch.setattr(link_service, "generate_random_code", lambda: next(codes))

    link = await link_service.create_short_link(db, "https://b.com")
    assert link.code == "fresh01"
    assert link.original_url == "https://b.com"


@pytest.mark.asyncio
async def test_generated_code_attempts_are_bounded(db, monkeypatch):
    await crud.create_link(db, "taken01", "https://a.com")
    calls = []

    def always_taken():
        calls.append(1)
        return "taken01"

    monkeypatch.setattr(link_service, "generate_random_code", always_taken)

    with pytest.raises(CodeGenerationError):
        await link_service.create_short_link(db, "https://b.com")
    assert len(calls) == link_service.MAX_CODE_ATTEMPTS


def test_build_short_url():
    assert link_service.build_short_url("http://sho.rt", "abc123") == "http://sho.rt/abc123"
    assert link_service.build_short_url("http://sho.rt/", "abc123") == "http://sho.rt/abc123"
    assert link_service.build_short_url("", "abc123") == "/abc123"


@pytest.mark.asyncio
async def test_to_response_shape(db):
    link = await link_service.create_short_link(db, "https://a.com", "abc123")
    body = link_service.to_response(link, "http://sho.rt").model_dump(by_alias=True)
    assert set(body) == {"code", "shortUrl", "originalUrl", "clickCount", "lastClickedAt", "createdAt"}
    assert body["shortUrl"] == "http://sho.rt/abc123"
    assert body["createdAt"].tzinfo is not None


@pytest.mark.asyncio
async def test_reserved_paths_never_reach_store(db, monkeypatch):
    async def fail(*args, **kwargs):
        raise AssertionError("store must not be reached")

    monkeypatch.setattr(crud, "record_click_and_fetch", fail)

    with pytest.raises(LinkNotFoundError):
        await redirect_service.resolve_redirect(db, "favicon.ico")


@pytest.mark.asyncio
async def test_resolve_redirect_counts_click(db):
    await link_service.create_short_link(db, "https://a.com", "abc123")
    link = await redirect_service.resolve_redirect(db, "abc123")
    assert link.original_url == "https://a.com"
    assert link.click_count == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("code", ["healthz", "metrics", "static"])
async def test_route_names_are_taken(db, code):
    with pytest.raises(DuplicateCodeError):
        await link_service.create_short_link(db, "https://a.com", code)
    assert await crud.list_links(db) == []


@pytest.mark.asyncio
async def test_generated_route_name_is_skipped(db, monkeypatch):
    codes = iter(["metrics", "fresh02"])
    monkeypatch.setattr(link_service, "generate_random_code", lambda: next(codes))

    link = await link_service.create_short_link(db, "https://a.com")
    assert link.code == "fresh02"
