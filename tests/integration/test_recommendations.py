"""Recommendation service and endpoint tests."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.book import Book, Genre
from app.models.user import User
from app.schemas.user import UserPreferences
from app.services.recommendation_service import RecommendationService
from app.services.status_service import StatusService
from app.services.user_service import UserService


class TestSimilarReaders:
    @pytest.mark.asyncio
    async def test_excludes_books_the_user_touched(
        self,
        db_session: AsyncSession,
        test_user: User,
        fantasy: Genre,
        user_factory,
        book_factory,
    ):
        await UserService(db_session).update_user_preferences(
            test_user.id, UserPreferences(genres=["Fantasy"])
        )
        reader = await user_factory("reader", genres=[fantasy])
        unread = await book_factory("Unread", genres=[fantasy])
        shelved = await book_factory("Shelved", genres=[fantasy])
        rated = await book_factory("Rated", genres=[fantasy])

        statuses = StatusService(db_session)
        for book in (unread, shelved, rated):
            await statuses.rate_book(reader.id, book.id, 5)
        await statuses.update_user_book_status(test_user.id, shelved.id, "want-to-read")
        await statuses.rate_book(test_user.id, rated.id, 2)

        recommendations = await RecommendationService(db_session).get_book_recommendations(
            test_user.id, "similar"
        )

        assert [r.book_id for r in recommendations] == [unread.id]
        top = recommendations[0]
        assert top.reason.kind == "similar"
        assert top.reason.genre_overlap == 1
        assert top.match_percent == 35
        assert top.genres == ["Fantasy"]

    @pytest.mark.asyncio
    async def test_unknown_filter_falls_back_to_similar(
        self,
        db_session: AsyncSession,
        test_user: User,
        other_user: User,
        test_book: Book,
    ):
        await StatusService(db_session).rate_book(other_user.id, test_book.id, 4)
        service = RecommendationService(db_session)

        fallback = await service.get_book_recommendations(test_user.id, "bookclub")

        assert [r.book_id for r in fallback] == [test_book.id]
        assert fallback[0].reason.kind == "similar"
        assert fallback[0].match_percent == 40

    @pytest.mark.asyncio
    async def test_no_candidates(self, db_session: AsyncSession, test_user: User):
        service = RecommendationService(db_session)

        assert await service.get_book_recommendations(test_user.id) == []


class TestRanking:
    @pytest.mark.asyncio
    async def test_best_scores_first_within_limit(
        self,
        db_session: AsyncSession,
        test_user: User,
        other_user: User,
        book_factory,
    ):
        alpha = await book_factory("Alpha")
        beta = await book_factory("Beta")
        gamma = await book_factory("Gamma")

        statuses = StatusService(db_session)
        await statuses.rate_book(other_user.id, alpha.id, 3)
        await statuses.rate_book(other_user.id, gamma.id, 5)
        await statuses.rate_book(other_user.id, beta.id, 5)

        recommendations = await RecommendationService(db_session).get_book_recommendations(
            test_user.id, "similar", limit=2
        )

        # Equal scores are ordered by title
        assert [r.book_id for r in recommendations] == [beta.id, gamma.id]
        assert [r.match_percent for r in recommendations] == [50, 50]


class TestFriendsActivity:
    @pytest.mark.asyncio
    async def test_ranked_by_friend_count(
        self,
        db_session: AsyncSession,
        test_user: User,
        user_factory,
        book_factory,
    ):
        amira = await user_factory("amira", display_name="Amira Haddad")
        bob = await user_factory("bob", display_name="Bob Stone")
        stranger = await user_factory("stranger", display_name="Sam Stranger")
        users = UserService(db_session)
        await users.add_friend(test_user.id, amira.id)
        await users.add_friend(test_user.id, bob.id)

        popular = await book_factory("Popular")
        loved = await book_factory("Loved")
        ignored = await book_factory("Ignored")

        statuses = StatusService(db_session)
        await statuses.update_user_book_status(amira.id, popular.id, "reading")
        await statuses.update_user_book_status(bob.id, popular.id, "reading")
        await statuses.rate_book(bob.id, popular.id, 5)
        await statuses.rate_book(bob.id, loved.id, 5)
        await statuses.rate_book(amira.id, ignored.id, 2)
        await statuses.update_user_book_status(stranger.id, ignored.id, "reading")

        recommendations = await RecommendationService(db_session).get_book_recommendations(
            test_user.id, "friends"
        )

        assert [r.book_id for r in recommendations] == [popular.id, loved.id]
        assert recommendations[0].reason.friend_count == 2
        assert recommendations[0].reason.message == "Amira and 1 others are reading"
        assert recommendations[0].match_percent == 40
        assert recommendations[1].reason.message == "Bob is reading"


class TestProfession:
    @pytest.mark.asyncio
    async def test_match_percent_capped(
        self,
        db_session: AsyncSession,
        test_user: User,
        user_factory,
        book_factory,
    ):
        book = await book_factory("Design Patterns")
        statuses = StatusService(db_session)
        for i in range(8):
            reader = await user_factory(f"engineer{i}", profession="Engineer")
            await statuses.rate_book(reader.id, book.id, 5)

        recommendations = await RecommendationService(db_session).get_book_recommendations(
            test_user.id, "profession"
        )

        assert len(recommendations) == 1
        assert recommendations[0].match_percent == 99
        assert recommendations[0].reason.kind == "profession"
        assert recommendations[0].reason.reader_count == 8
        assert recommendations[0].reason.profession_match is True

    @pytest.mark.asyncio
    async def test_without_shared_profession(
        self,
        db_session: AsyncSession,
        test_user: User,
        user_factory,
        book_factory,
    ):
        book = await book_factory("Cookbook")
        chef = await user_factory("chef", profession="Chef")
        await StatusService(db_session).rate_book(chef.id, book.id, 4)

        recommendations = await RecommendationService(db_session).get_book_recommendations(
            test_user.id, "profession"
        )

        assert recommendations[0].match_percent == 4
        assert recommendations[0].reason.profession_match is False


class TestRecommendationEndpoints:
    @pytest.mark.asyncio
    async def test_recommendations(
        self,
        authenticated_client: AsyncClient,
        test_book: Book,
    ):
        await authenticated_client.put(f"/v1/books/{test_book.id}/status", json={"status": "want-to-read"})

        response = await authenticated_client.get("/v1/recommendations", params={"filter": "unknown"})

        assert response.status_code == 200
        recommendations = response.json()
        assert str(test_book.id) not in [r["book_id"] for r in recommendations]
        assert all(r["reason"]["kind"] == "similar" for r in recommendations)

    @pytest.mark.asyncio
    async def test_limit_range(self, authenticated_client: AsyncClient):
        response = await authenticated_client.get("/v1/recommendations", params={"limit": 0})

        assert response.status_code == 422
