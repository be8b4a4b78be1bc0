"""Product aggregate.

The product owns two child collections, images and ratings, and two derived
fields, ``final_price`` and ``average_rating``. The derived fields are only
ever written by ``_recompute_final_price`` / ``_recompute_average_rating``,
which run in the same call that changes their inputs.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Iterator
from uuid import UUID

from catalog.core.exceptions import NotFoundError, ValidationFailedError

PRODUCT_STATUSES = ("active", "inactive", "outOfStock")

MIN_SCORE = 1
MAX_SCORE = 5
MIN_REVIEW_LENGTH = 10


def compute_final_price(price: float, discount: float) -> float:
    """Price after applying a percentage discount.

    No rounding is applied.
    """
    if discount > 0:
        return price - price * (discount / 100)
    return price


def compute_average_rating(scores: Iterable[float]) -> float:
    """Arithmetic mean of the scores, 0 when there are none."""
    scores = list(scores)
    if not scores:
        return 0
    return sum(scores) / len(scores)


def validate_rating(score: float, review: str | None) -> str | None:
    """Check score range and review length, returning the trimmed review."""
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise ValidationFailedError(
            f"Rating must be between {MIN_SCORE} and {MAX_SCORE}"
        )
    if review is None:
        return None
    review = review.strip()
    if len(review) < MIN_REVIEW_LENGTH:
        raise ValidationFailedError(
            f"Review must be at least {MIN_REVIEW_LENGTH} characters"
        )
    return review


@dataclass(frozen=True)
class ProductImage:
    image_id: UUID
    url: str
    asset_id: str | None = None


@dataclass(frozen=True)
class ProductRating:
    user_id: UUID
    score: float
    rated_at: datetime
    review: str | None = None


@dataclass(frozen=True)
class UploadedAsset:
    """What the asset store hands back for a stored image."""

    url: str
    asset_id: str


@dataclass(frozen=True)
class UploadOutcome:
    """Result of uploading the file at ``index`` of a batch."""

    index: int
    image: ProductImage | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.image is not None


@dataclass(frozen=True)
class DeleteFailure:
    image_id: UUID
    asset_id: str | None
    reason: str


class ImageCollection:
    """Ordered product images, unique by ``image_id``."""

    def __init__(self, images: Iterable[ProductImage] = ()):
        self._images: list[ProductImage] = []
        self.extend(images)

    def __iter__(self) -> Iterator[ProductImage]:
        return iter(self._images)

    def __len__(self) -> int:
        return len(self._images)

    def __contains__(self, image_id: object) -> bool:
        return any(image.image_id == image_id for image in self._images)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImageCollection):
            return NotImplemented
        return self._images == other._images

    def __repr__(self) -> str:
        return f"ImageCollection({self._images!r})"

    def get(self, image_id: UUID) -> ProductImage:
        for image in self._images:
            if image.image_id == image_id:
                return image
        raise NotFoundError(f"Image {image_id} not found")

    def append(self, image: ProductImage) -> None:
        if image.image_id in self:
            raise ValidationFailedError(f"Duplicate image id {image.image_id}")
        self._images.append(image)

    def extend(self, images: Iterable[ProductImage]) -> None:
        for image in images:
            self.append(image)

    def remove(self, image_id: UUID) -> ProductImage:
        image = self.get(image_id)
        self._images.remove(image)
        return image


class RatingCollection:
    """Ratings keyed by rater; insertion order is kept, replacement is in place."""

    def __init__(self, ratings: Iterable[ProductRating] = ()):
        self._ratings: list[ProductRating] = []
        for rating in ratings:
            self.upsert(rating)

    def __iter__(self) -> Iterator[ProductRating]:
        return iter(self._ratings)

    def __len__(self) -> int:
        return len(self._ratings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RatingCollection):
            return NotImplemented
        return self._ratings == other._ratings

    def __repr__(self) -> str:
        return f"RatingCollection({self._ratings!r})"

    def get(self, user_id: UUID) -> ProductRating | None:
        for rating in self._ratings:
            if rating.user_id == user_id:
                return rating
        return None

    def upsert(self, rating: ProductRating) -> None:
        for i, existing in enumerate(self._ratings):
            if existing.user_id == rating.user_id:
                self._ratings[i] = rating
                return
        self._ratings.append(rating)

    def scores(self) -> list[float]:
        return [rating.score for rating in self._ratings]


@dataclass(eq=False)
class Product:
    """Aggregate root for a catalog product."""

    product_id: UUID
    sku: str
    name: str
    description: str
    price: float
    category_id: UUID | None = None
    discount: float = 0
    quantity: int = 0
    status: str = "active"
    features: list[str] = field(default_factory=list)
    images: ImageCollection = field(default_factory=ImageCollection)
    ratings: RatingCollection = field(default_factory=RatingCollection)
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    final_price: float = field(init=False)
    average_rating: float = field(init=False)

    def __post_init__(self) -> None:
        self._check_pricing(self.price, self.discount)
        if self.status not in PRODUCT_STATUSES:
            raise ValidationFailedError(f"Invalid product status: {self.status}")
        self._recompute_final_price()
        self._recompute_average_rating()

    @staticmethod
    def _check_pricing(price: float, discount: float) -> None:
        if price < 0:
            raise ValidationFailedError("Price must be non-negative")
        if not 0 <= discount <= 100:
            raise ValidationFailedError("Discount must be between 0 and 100")

    def _recompute_final_price(self) -> None:
        self.final_price = compute_final_price(self.price, self.discount)

    def _recompute_average_rating(self) -> None:
        self.average_rating = compute_average_rating(self.ratings.scores())

    def set_pricing(
        self, price: float | None = None, discount: float | None = None
    ) -> None:
        """Change price and/or discount and refresh the final price."""
        new_price = self.price if price is None else price
        new_discount = self.discount if discount is None else discount
        self._check_pricing(new_price, new_discount)
        self.price = new_price
        self.discount = new_discount
        self._recompute_final_price()

    def set_status(self, status: str) -> None:
        if status not in PRODUCT_STATUSES:
            raise ValidationFailedError(f"Invalid product status: {status}")
        self.status = status

    def rate(
        self,
        user_id: UUID,
        score: float,
        rated_at: datetime,
        review: str | None = None,
    ) -> ProductRating:
        """Insert or replace ``user_id``'s rating and refresh the average."""
        review = validate_rating(score, review)
        rating = ProductRating(
            user_id=user_id, score=score, rated_at=rated_at, review=review
        )
        self.ratings.upsert(rating)
        self._recompute_average_rating()
        return rating

    def add_images(self, images: Iterable[ProductImage]) -> None:
        self.images.extend(images)

    def remove_image(self, image_id: UUID) -> ProductImage:
        return self.images.remove(image_id)
