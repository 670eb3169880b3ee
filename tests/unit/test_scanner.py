from snapsync.catalog.dedup_cache import DedupCatalogCache
from snapsync.chat.models import ChatEmbed, ChatMessage
from snapsync.ingestion.scanner import Scanner


def _scanner(chat_client, start_date, cache=None, **kwargs) -> Scanner:
    return Scanner(
        chat_client,
        cache if cache is not None else DedupCatalogCache(),
        channel_id="chan",
        start_date=start_date,
        **kwargs,
    )


class TestCandidates:
    def test_yields_candidate_with_derived_names(
        self, make_message, chat_client_factory, start_date
    ) -> None:
        client = chat_client_factory([[make_message()]])

        candidates = list(_scanner(client, start_date).scan())

        assert len(candidates) == 1
        candidate = candidates[0]
        assert candidate.key == "snapmatic/Rocco/42.jpg"
        assert candidate.staged_name == "Rocco_42.jpg"
        assert candidate.author == "Rocco"
        assert candidate.image_url == "http://x/a.jpg"

    def test_falls_back_to_message_author(
        self, make_message, chat_client_factory, start_date
    ) -> None:
        client = chat_client_factory([[make_message(description=None, username="po.ster")]])

        candidates = list(_scanner(client, start_date).scan())

        assert candidates[0].key == "snapmatic/poster/42.jpg"

    def test_skips_embeds_without_image(
        self, make_message, chat_client_factory, start_date
    ) -> None:
        client = chat_client_factory([[make_message(image_url=None)]])

        assert list(_scanner(client, start_date).scan()) == []

    def test_skips_messages_before_start_date(
        self, make_message, chat_client_factory, start_date
    ) -> None:
        old = make_message(message_id="1", minutes=-60 * 24 * 3)
        client = chat_client_factory([[make_message(message_id="2"), old]])

        keys = [c.key for c in _scanner(client, start_date).scan()]

        assert keys == ["snapmatic/Rocco/2.jpg"]

    def test_excludes_keys_already_in_catalog(
        self, make_message, chat_client_factory, start_date
    ) -> None:
        cache = DedupCatalogCache(["snapmatic/Rocco/42.jpg"])
        client = chat_client_factory([[make_message()]])

        assert list(_scanner(client, start_date, cache).scan()) == []

    def test_rechecks_catalog_while_iterating(
        self, make_message, chat_client_factory, start_date
    ) -> None:
        cache = DedupCatalogCache()
        client = chat_client_factory(
            [[make_message(message_id="2", minutes=1), make_message(message_id="1")]]
        )
        scan = _scanner(client, start_date, cache).scan()

        first = next(scan)
        cache.add("snapmatic/Rocco/2.jpg")

        assert first.key == "snapmatic/Rocco/1.jpg"
        assert list(scan) == []

    def test_multiple_embeds_in_one_message(self, chat_client_factory, start_date, make_message) -> None:
        base = make_message()
        message = ChatMessage(
            id="42",
            created_at=base.created_at,
            author=base.author,
            embeds=(
                ChatEmbed("Uploaded by Rocco", "http://x/a.jpg"),
                ChatEmbed("Uploaded by Vin", "http://x/b.png"),
            ),
        )
        client = chat_client_factory([[message]])

        keys = sorted(c.key for c in _scanner(client, start_date).scan())

        assert keys == ["snapmatic/Rocco/42.jpg", "snapmatic/Vin/42.png"]


class TestOrdering:
    def test_yields_oldest_first(self, make_message, chat_client_factory, start_date) -> None:
        newest_first = [
            make_message(message_id="30", minutes=30),
            make_message(message_id="20", minutes=20),
            make_message(message_id="10", minutes=10),
        ]
        client = chat_client_factory([newest_first])

        ids = [c.message.id for c in _scanner(client, start_date).scan()]

        assert ids == ["10", "20", "30"]


class TestPaging:
    def test_single_page_by_default(self, make_message, chat_client_factory, start_date) -> None:
        page = [make_message(message_id=str(i), minutes=i) for i in range(3, 0, -1)]
        client = chat_client_factory([page, [make_message(message_id="0")]])

        list(_scanner(client, start_date, batch_size=3).scan())

        assert len(client.calls) == 1
        assert client.calls[0]["limit"] == 3
        assert client.calls[0]["before"] is None

    def test_pages_backwards_within_window(
        self, make_message, chat_client_factory, start_date
    ) -> None:
        first = [make_message(message_id=str(i), minutes=i) for i in (6, 5)]
        second = [make_message(message_id=str(i), minutes=i) for i in (4, 3)]
        third = [make_message(message_id="2", minutes=2)]
        client = chat_client_factory([first, second, third])

        ids = [
            c.message.id
            for c in _scanner(client, start_date, batch_size=2, max_pages=5).scan()
        ]

        assert ids == ["2", "3", "4", "5", "6"]
        assert [call["before"] for call in client.calls] == [None, "5", "3"]

    def test_stops_at_start_date(self, make_message, chat_client_factory, start_date) -> None:
        page = [
            make_message(message_id="9", minutes=9),
            make_message(message_id="1", minutes=-60 * 24 * 2),
        ]
        client = chat_client_factory([page, [make_message(message_id="0")]])

        list(_scanner(client, start_date, batch_size=2, max_pages=5).scan())

        assert len(client.calls) == 1

    def test_batch_size_capped_at_100(self, chat_client_factory, start_date) -> None:
        client = chat_client_factory([[]])

        list(_scanner(client, start_date, batch_size=500).scan())

        assert client.calls[0]["limit"] == 100

    def test_each_scan_starts_fresh(self, make_message, chat_client_factory, start_date) -> None:
        client = chat_client_factory([[make_message()], [make_message()]])
        scanner = _scanner(client, start_date)

        list(scanner.scan())
        list(scanner.scan())

        assert [call["before"] for call in client.calls] == [None, None]

