import asyncio
import threading
from collections.abc import Iterator
from http.server import ThreadingHTTPServer

import pytest

from conftest import make_settings
from mock_bitable_store import MockBitableHandler
from navsite.services.errors import StoreNotFoundError
from navsite.services.links import LinkService, LinkSubmission
from navsite.services.review import ReviewWorkflow
from navsite.services.stores import StoreGateway
from navsite.services.tables import TableLocator


@pytest.fixture
def store_base_url() -> Iterator[str]:
    server = ThreadingHTTPServer(("127.0.0.1", 0), MockBitableHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}/open-apis"
    finally:
        server.shutdown()
        server.server_close()


def test_submission_survives_review_against_mock_store(store_base_url: str) -> None:
    settings = make_settings(
        store_base_url=store_base_url,
        table_id="tblIntegrationLive",
        staging_table_id="tblIntegrationStaging",
        meta_table_id="tblIntegrationMeta",
    )

    async def scenario() -> tuple[list[str], list[str]]:
        gateway = StoreGateway(settings)
        try:
            locator = TableLocator(gateway, settings)
            links = LinkService(gateway, locator, settings)
            review = ReviewWorkflow(gateway, locator, settings)

            submitted = await links.submit(
                LinkSubmission(name="GitHub", url="https://github.com", category="Code", sort=200),
                authorized=False,
            )
            pending = await review.list_pending(page_token=None, page_size=20)
            assert [item.id for item in pending.items] == [submitted.record_id]
            assert pending.items[0].created_at is not None

            await review.approve(submitted.record_id)
            with pytest.raises(StoreNotFoundError):
                await review.reject(submitted.record_id)

            published = await gateway.published(gateway.default_coordinates()).list_all()
            remaining = await gateway.staging().list_all()
            return [record.fields["站点名称"] for record in published], [record.record_id for record in remaining]
        finally:
            await gateway.close()

    published_names, remaining_ids = asyncio.run(scenario())

    assert published_names == ["GitHub"]
    assert remaining_ids == []
