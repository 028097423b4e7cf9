import uuid

from slugify import slugify
from sqlalchemy import event

from .models import Property
from .utils import normalize_city


@event.listens_for(Property, "before_insert")
def generate_slug(mapper, connection, target: Property):
    if not target.slug:
        target.slug = slugify(f"{target.title}-{target.city}-{uuid.uuid4().hex[:6]}")


@event.listens_for(Property, "before_insert")
@event.listens_for(Property, "before_update")
def normalize_location(mapper, connection, target: Property):
    target.city = normalize_city(target.city)
    if target.area:
        target.area = target.area.strip()
