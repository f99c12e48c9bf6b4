"""Category aggregate root for grouping products on the shelf."""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


@storefront.aggregate
class Category:
    """A grouping such as 'Dairy & Eggs'. Categories may nest under a parent."""

    name: String(required=True, max_length=50)
    description: String(max_length=200)
    parent_category_id: Identifier()
    image_url: String(max_length=500)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, name, description=None, parent_category_id=None, image_url=None):
        from storefront.catalogue.events import CategoryCreated

        now = datetime.now(UTC)
        category = cls(
            name=name.strip(),
            description=description,
            parent_category_id=parent_category_id,
            image_url=image_url,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryCreated(
                category_id=category.id,
                name=category.name,
                parent_category_id=parent_category_id,
            )
        )
        return category
