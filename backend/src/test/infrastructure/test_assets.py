# tests/infrastructure/test_assets.py
import pytest

from infrastructure.content.assets import AssetStore
from infrastructure.queue.errors import AssetNotFoundError


def test_candidates_follow_site_conventions(site_dir):
    assets = AssetStore(str(site_dir))
    assert assets.candidates("/") == ["/index.html"]
    assert assets.candidates("/docs/") == ["/docs/index.html"]
    assert assets.candidates("/about") == ["/about.html", "/about/index.html"]
    assert assets.candidates("/css/site.css") == ["/css/site.css"]


def test_prefix_is_stripped(site_dir):
    assets = AssetStore(str(site_dir), prefix="/shop/")
    assert assets.candidates("/shop") == ["/index.html"]
    assert assets.candidates("/shop/about") == ["/about.html", "/about/index.html"]
    assert assets.candidates("/shopping") == ["/shopping.html", "/shopping/index.html"]


@pytest.mark.asyncio
async def test_fetch_index_and_extensionless_page(site_dir):
    assets = AssetStore(str(site_dir))

    home = await assets.fetch("/")
    about = await assets.fetch("/about")
    css = await assets.fetch("/css/site.css")

    assert home.body == b"<h1>home</h1>"
    assert home.media_type == "text/html"
    assert about.name == "/about.html"
    assert css.media_type == "text/css"


@pytest.mark.asyncio
async def test_missing_asset_raises(site_dir):
    assets = AssetStore(str(site_dir))
    with pytest.raises(AssetNotFoundError):
        await assets.fetch("/nope")


@pytest.mark.asyncio
async def test_paths_cannot_escape_site_root(site_dir):
    (site_dir.parent / "secret.txt").write_text("s3cret", encoding="utf-8")
    assets = AssetStore(str(site_dir))
    with pytest.raises(AssetNotFoundError):
        await assets.fetch("/../secret.txt")


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/a\x00b", "/" + "a" * 300])
async def test_unusable_file_names_are_not_found(site_dir, path):
    assets = AssetStore(str(site_dir))
    with pytest.raises(AssetNotFoundError):
        await assets.fetch(path)


@pytest.mark.asyncio
async def test_named_page_ignores_prefix(site_dir):
    assets = AssetStore(str(site_dir), prefix="/shop")
    page = await assets.page("waitroom.html")
    assert page.body == b"<h1>please wait</h1>"
