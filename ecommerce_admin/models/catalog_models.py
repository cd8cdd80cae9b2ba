# ecommerce_admin/models/catalog_models.py
import uuid

from .base import db, BaseModel, AuditMixin, SoftDeleteMixin, active_unique_index
from .enums import RecordStatusEnum


def _money(value):
    return float(value) if value is not None else None


class CatalogMixin(AuditMixin, SoftDeleteMixin):
    """Columns shared by every catalogue table."""
    status_id = db.Column(db.Integer, nullable=False, default=RecordStatusEnum.ACTIVE.value, index=True)
    order = db.Column(db.Integer, nullable=False, default=0)

    def catalog_dict(self):
        data = {"status_id": self.status_id, "order": self.order}
        data.update(self.audit_dict())
        return data


class Brand(BaseModel, CatalogMixin):
    __tablename__ = 'brands'
    __table_args__ = (active_unique_index('brands', 'slug'),)
    name = db.Column(db.String(255), nullable=False, index=True)
    slug = db.Column(db.String(255), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    web_url = db.Column(db.String(255), nullable=True)
    is_featured = db.Column(db.Boolean, default=False, nullable=False, index=True)

    products = db.relationship('Product', back_populates='brand', lazy='dynamic')

    def live_products_count(self):
        return self.products.filter(Product.deleted_at.is_(None)).count()

    def to_dict(self, include_counts=False):
        data = {
            "id": self.id, "name": self.name, "slug": self.slug, "description": self.description,
            "web_url": self.web_url, "is_featured": self.is_featured,
        }
        data.update(self.catalog_dict())
        if include_counts:
            data["products_count"] = self.live_products_count()
        return data

    def __repr__(self): return f'<Brand {self.name}>'


class Category(BaseModel, CatalogMixin):
    __tablename__ = 'categories'
    __table_args__ = (active_unique_index('categories', 'slug'),)
    name = db.Column(db.String(255), nullable=False, index=True)
    slug = db.Column(db.String(255), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    parent_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=True, index=True)
    is_featured = db.Column(db.Boolean, default=False, nullable=False, index=True)

    parent = db.relationship('Category', remote_side='Category.id', back_populates='children')
    children = db.relationship('Category', back_populates='parent', lazy='dynamic')
    products = db.relationship('Product', back_populates='category', lazy='dynamic')

    def live_children(self):
        return self.children.filter(Category.deleted_at.is_(None))

    def to_dict(self, include_relations=False):
        data = {
            "id": self.id, "name": self.name, "slug": self.slug, "description": self.description,
            "parent_id": self.parent_id, "is_featured": self.is_featured,
        }
        data.update(self.catalog_dict())
        if include_relations:
            parent = self.parent if self.parent and not self.parent.is_deleted else None
            data["parent"] = parent.to_dict() if parent else None
            data["children"] = [child.to_dict() for child in self.live_children().order_by(Category.name)]
        return data

    def __repr__(self): return f'<Category {self.name}>'


class Product(BaseModel, CatalogMixin):
    __tablename__ = 'products'
    __table_args__ = (active_unique_index('products', 'slug'),)
    uuid = db.Column(db.String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(255), nullable=False, index=True)
    slug = db.Column(db.String(255), nullable=False, index=True)
    sku = db.Column(db.String(100), unique=True, nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    base_price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=False, index=True)
    brand_id = db.Column(db.Integer, db.ForeignKey('brands.id'), nullable=False, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    is_featured = db.Column(db.Boolean, default=False, nullable=False, index=True)

    category = db.relationship('Category', back_populates='products')
    brand = db.relationship('Brand', back_populates='products')
    variants = db.relationship('ProductVariant', back_populates='product', lazy='dynamic')

    def live_variants(self):
        return self.variants.filter(ProductVariant.deleted_at.is_(None))

    def to_dict(self, include_relations=False):
        data = {
            "id": self.id, "uuid": self.uuid, "name": self.name, "slug": self.slug, "sku": self.sku,
            "description": self.description, "base_price": _money(self.base_price),
            "category_id": self.category_id, "brand_id": self.brand_id,
            "is_active": self.is_active, "is_featured": self.is_featured,
        }
        data.update(self.catalog_dict())
        if include_relations:
            data["category"] = self.category.to_dict() if self.category else None
            data["brand"] = self.brand.to_dict() if self.brand else None
            data["variants"] = [v.to_dict() for v in self.live_variants().order_by(ProductVariant.id)]
        return data

    def __repr__(self): return f'<Product {self.sku}>'


class Color(BaseModel, CatalogMixin):
    __tablename__ = 'colors'
    __table_args__ = (active_unique_index('colors', 'name'), active_unique_index('colors', 'code'))
    name = db.Column(db.String(50), nullable=False)
    code = db.Column(db.String(20), nullable=True)
    hex_code = db.Column(db.String(7), nullable=True)

    variants = db.relationship('ProductVariant', back_populates='color', lazy='dynamic')

    def live_variants_count(self):
        return self.variants.filter(ProductVariant.deleted_at.is_(None)).count()

    def to_dict(self):
        data = {"id": self.id, "name": self.name, "code": self.code, "hex_code": self.hex_code}
        data.update(self.catalog_dict())
        return data

    def __repr__(self): return f'<Color {self.name}>'


class Size(BaseModel, CatalogMixin):
    __tablename__ = 'sizes'
    __table_args__ = (active_unique_index('sizes', 'name'), active_unique_index('sizes', 'code'))
    name = db.Column(db.String(50), nullable=False)
    code = db.Column(db.String(20), nullable=False)
    description = db.Column(db.String(255), nullable=True)

    variants = db.relationship('ProductVariant', back_populates='size', lazy='dynamic')

    def live_variants_count(self):
        return self.variants.filter(ProductVariant.deleted_at.is_(None)).count()

    def to_dict(self):
        data = {"id": self.id, "name": self.name, "code": self.code, "description": self.description}
        data.update(self.catalog_dict())
        return data

    def __repr__(self): return f'<Size {self.code}>'


class ProductVariant(BaseModel, CatalogMixin):
    __tablename__ = 'product_variants'
    __table_args__ = (active_unique_index('product_variants', 'product_id', 'color_id', 'size_id'),)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False, index=True)
    color_id = db.Column(db.Integer, db.ForeignKey('colors.id'), nullable=False, index=True)
    size_id = db.Column(db.Integer, db.ForeignKey('sizes.id'), nullable=False, index=True)
    sku_extension = db.Column(db.String(50), nullable=False)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    price_adjustment = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    product = db.relationship('Product', back_populates='variants')
    color = db.relationship('Color', back_populates='variants')
    size = db.relationship('Size', back_populates='variants')

    @property
    def sku(self):
        return f"{self.product.sku}-{self.sku_extension}" if self.product else self.sku_extension

    @property
    def price(self):
        if self.product is None:
            return None
        return _money(self.product.base_price) + (_money(self.price_adjustment) or 0.0)

    def to_dict(self):
        data = {
            "id": self.id, "product_id": self.product_id, "color_id": self.color_id, "size_id": self.size_id,
            "sku_extension": self.sku_extension, "sku": self.sku, "stock_quantity": self.stock_quantity,
            "price_adjustment": _money(self.price_adjustment), "price": self.price,
            "color": self.color.name if self.color else None,
            "size": self.size.code if self.size else None,
        }
        data.update(self.catalog_dict())
        return data

    def __repr__(self): return f'<ProductVariant {self.sku}>'
