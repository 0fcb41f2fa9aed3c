"""
Customer Feedback Records

A FeedbackRecord is one row of the customer-feedback CSV. Field aliases
match the CSV header names so rows validate directly:

    >>> FeedbackRecord.model_validate(row)  # row from csv.DictReader

Identity is carried by the customer identifier alone. Equality and
ordering are exposed as explicit helpers (same_record, record_sort_key)
rather than operator overloads, so pydantic's field-wise equality stays
available for tests.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# CSV header -> field name, in file order
CSV_COLUMNS: dict[str, str] = {
    "CustomerID": "customer_id",
    "Age": "age",
    "Gender": "gender",
    "Country": "country",
    "Income": "income",
    "ProductQuality": "product_quality",
    "ServiceQuality": "service_quality",
    "PurchaseFrequency": "purchase_frequency",
    "FeedbackScore": "feedback_score",
    "LoyaltyLevel": "loyalty_level",
    "SatisfactionScore": "satisfaction_score",
}


class FeedbackRecord(BaseModel):
    """
    One customer's feedback profile.

    Attributes:
        customer_id: Unique customer identifier
        age: Age in years
        gender: Gender as reported
        country: Country of residence
        income: Annual income
        product_quality: Product quality rating (0-10)
        service_quality: Service quality rating (0-10)
        purchase_frequency: Purchases per year
        feedback_score: Categorical feedback ("Low", "Medium", "High")
        loyalty_level: Categorical loyalty ("Bronze", "Silver", "Gold")
        satisfaction_score: Satisfaction percentage
        profile_summary: Generated text used for embedding (not in the CSV)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    customer_id: str = Field(..., alias="CustomerID", min_length=1)
    age: int = Field(..., alias="Age", ge=0)
    gender: str = Field(..., alias="Gender")
    country: str = Field(..., alias="Country")
    income: float = Field(..., alias="Income")
    product_quality: int = Field(..., alias="ProductQuality", ge=0, le=10)
    service_quality: int = Field(..., alias="ServiceQuality", ge=0, le=10)
    purchase_frequency: int = Field(..., alias="PurchaseFrequency", ge=0)
    feedback_score: str = Field(..., alias="FeedbackScore")
    loyalty_level: str = Field(..., alias="LoyaltyLevel")
    satisfaction_score: float = Field(..., alias="SatisfactionScore")
    profile_summary: str = Field(default="", exclude=True)

    def with_summary(self, summary: str) -> "FeedbackRecord":
        """Return a copy carrying the given profile summary."""
        return self.model_copy(update={"profile_summary": summary})

    def embedding_text(self) -> str:
        """
        The single canonical text embedded for this record.

        Raises:
            ValueError: If the profile summary has not been generated yet
        """
        if not self.profile_summary:
            raise ValueError(
                f"Record {self.customer_id} has no profile summary; "
                "summarize it before embedding"
            )
        return self.profile_summary


def same_record(a: FeedbackRecord, b: FeedbackRecord) -> bool:
    """Two records are the same customer iff their identifiers match."""
    return a.customer_id == b.customer_id


def record_sort_key(record: FeedbackRecord) -> str:
    """Sort key for deterministic ordering (lexicographic by identifier)."""
    return record.customer_id


def dedupe_records(records: list[FeedbackRecord]) -> list[FeedbackRecord]:
    """
    Keep the first record for each identifier, sorted by identifier.

    Not applied during ingestion (duplicates are indexed as-is); useful for
    reporting and tests that need a stable, unique view.
    """
    seen: set[str] = set()
    unique: list[FeedbackRecord] = []
    for record in records:
        if record.customer_id not in seen:
            seen.add(record.customer_id)
            unique.append(record)
    return sorted(unique, key=record_sort_key)
