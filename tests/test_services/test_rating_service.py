import unittest
from unittest.mock import MagicMock

from hostel.models.reviews import Review, ReviewStatus
from hostel.models.rooms import Room
from hostel.services.rating_service import RatingService, summarize
from hostel.utils.custom_exceptions import ConflictException, NotFoundException


def make_review(rating, status=ReviewStatus.APPROVED, **categories):
    review = Review(
        review_id=f"rv{rating}",
        student_id="STU1",
        room_id="r1",
        booking_id="b1",
        rating=rating,
        title="t",
        comment="c",
        status=status,
    )
    review.categories.update(categories)
    return review


class TestSummarize(unittest.TestCase):

    def test_approved_reviews_only(self):
        summary = summarize(
            [
                make_review(5),
                make_review(4),
                make_review(3),
                make_review(1, ReviewStatus.PENDING),
                make_review(1, ReviewStatus.REJECTED),
            ]
        )

        self.assertEqual(4.0, summary.average_rating)
        self.assertEqual(3, summary.total_reviews)
        self.assertEqual({1: 0, 2: 0, 3: 1, 4: 1, 5: 1}, summary.rating_distribution)

    def test_no_approved_reviews(self):
        summary = summarize([make_review(2, ReviewStatus.PENDING)])

        self.assertEqual(0.0, summary.average_rating)
        self.assertEqual(0, summary.total_reviews)
        self.assertEqual({1: 0, 2: 0, 3: 0, 4: 0, 5: 0}, summary.rating_distribution)
        self.assertEqual({}, summary.category_averages)

    def test_average_rounds_half_up(self):
        summary = summarize([make_review(5), make_review(4), make_review(4), make_review(4)])

        # 4.25 -> 4.3
        self.assertEqual(4.3, summary.average_rating)

    def test_category_averages_skip_unrated(self):
        summary = summarize(
            [
                make_review(5, cleanliness=4, staff=5),
                make_review(4, cleanliness=3),
            ]
        )

        self.assertEqual(3.5, summary.category_averages["cleanliness"])
        self.assertEqual(5.0, summary.category_averages["staff"])
        self.assertNotIn("comfort", summary.category_averages)


class TestRatingService(unittest.TestCase):

    def setUp(self):
        self.room_repo = MagicMock()
        self.review_repo = MagicMock()
        self.service = RatingService(self.room_repo, self.review_repo, max_attempts=2)

        self.room_repo.get_room_by_id.return_value = Room(
            room_id="r1", room_number="101", capacity=2, price=1.0, review_version=6
        )
        self.review_repo.get_room_reviews.return_value = [make_review(5), make_review(3)]

    def test_recompute_writes_summary_for_seen_version(self):
        self.room_repo.update_rating_summary.return_value = True

        summary = self.service.recompute_room_rating("r1")

        self.assertEqual(4.0, summary.average_rating)
        self.room_repo.update_rating_summary.assert_called_once_with("r1", summary, 6)

    def test_recompute_retries_when_reviews_change(self):
        self.room_repo.update_rating_summary.side_effect = [False, True]

        self.service.recompute_room_rating("r1")

        self.assertEqual(2, self.review_repo.get_room_reviews.call_count)

    def test_recompute_gives_up(self):
        self.room_repo.update_rating_summary.return_value = False

        with self.assertRaises(ConflictException):
            self.service.recompute_room_rating("r1")

    def test_recompute_missing_room(self):
        self.room_repo.get_room_by_id.return_value = None

        with self.assertRaises(NotFoundException):
            self.service.recompute_room_rating("r1")


if __name__ == "__main__":
    unittest.main()
