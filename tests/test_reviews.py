"""Tests for the review corpus and the product review generator."""

import pytest

from apps.datagen.src.generators.products import ProductGenerator
from apps.datagen.src.generators.reviews import ProductReviewGenerator, ReferenceDataError, load_reviews

HEADER = "Rating,Comment,Size,Length\n"


class TestLoadReviews:
    def test_bundled_corpus(self):
        reviews = load_reviews()
        assert reviews
        assert all(1 <= review.rating <= 5 for review in reviews)
        assert [c.id for c in reviews[0].characteristics] == ["Size", "Length"]
        assert any(review.characteristics[0].has_issue for review in reviews)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ReferenceDataError, match="cannot read"):
            load_reviews(tmp_path / "absent.csv")

    def test_malformed_rating(self, tmp_path):
        corpus = tmp_path / "reviews.csv"
        corpus.write_text(HEADER + "great,Nice,2,2\n", encoding="utf-8")
        with pytest.raises(ReferenceDataError, match="malformed"):
            load_reviews(corpus)

    def test_missing_column(self, tmp_path):
        corpus = tmp_path / "reviews.csv"
        corpus.write_text("Rating,Comment,Size\n5,Nice,2\n", encoding="utf-8")
        with pytest.raises(ReferenceDataError, match="malformed"):
            load_reviews(corpus)

    def test_empty_corpus(self, tmp_path):
        corpus = tmp_path / "reviews.csv"
        corpus.write_text(HEADER, encoding="utf-8")
        with pytest.raises(ReferenceDataError, match="empty"):
            load_reviews(corpus)

    def test_blank_comment_is_none(self, tmp_path):
        corpus = tmp_path / "reviews.csv"
        corpus.write_text(HEADER + "3,,1,2\n", encoding="utf-8")
        (review,) = load_reviews(corpus)
        assert review.comment is None
        assert review.characteristics[0].ranking == 1


class TestProductReviewGenerator:
    def test_corpus_without_size_issues_rejected(self, make_settings, rng, fake, tmp_path):
        corpus = tmp_path / "reviews.csv"
        corpus.write_text(HEADER + "5,Fits,2,2\n4,Long,2,3\n", encoding="utf-8")
        settings = make_settings(reviews={"corpus_path": str(corpus)})

        with pytest.raises(ReferenceDataError, match="size issue"):
            ProductReviewGenerator(settings, rng, fake, {})

    def test_size_issue_product_gets_size_complaint(self, make_settings, rng, fake, now):
        settings = make_settings(reviews={"review_with_size_issue_ratio": 1.0})
        product = ProductGenerator(settings.products, rng).generate()
        generator = ProductReviewGenerator(
            settings, rng, fake, {product.short_description: product}, clock=lambda: now
        )

        for _ in range(20):
            review = generator.generate_for(product)
            assert review.product == product.short_description
            assert review.size == product.size
            assert review.review.characteristics[0].has_issue
            assert review.event_time == now

    def test_random_product_review(self, settings, rng, fake, now):
        generator = ProductReviewGenerator(settings, rng, fake, {}, clock=lambda: now)
        review = generator.generate()
        assert review.review in generator.reviews
        assert review.record_key == review.id
