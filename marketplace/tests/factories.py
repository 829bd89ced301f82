import random
import uuid
from decimal import Decimal

import factory
from django.contrib.auth import get_user_model
from django.utils.text import slugify
from faker import Faker

from marketplace.models import (
    Cart,
    CartItem,
    Category,
    Order,
    OrderItem,
    Product,
    ProductImage,
    ProductVariant,
    WishlistItem,
)

User = get_user_model()
fake = Faker()  # Instantiate Faker once


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User

    id = factory.LazyFunction(uuid.uuid4)
    username = factory.Sequence(lambda n: f"user_{n}")
    email = factory.Sequence(lambda n: f"user_{n}@example.com")
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    password = factory.PostGenerationMethodCall("set_password", "defaultpassword")
    is_active = True
    role = "user"


class AdminFactory(UserFactory):
    role = "admin"
    is_staff = True
    username = factory.Sequence(lambda n: f"admin_{n}")
    email = factory.Sequence(lambda n: f"admin_{n}@example.com")


class CategoryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Category

    name = factory.Sequence(lambda n: f"Category {n}")
    slug = factory.LazyAttribute(lambda o: slugify(o.name))
    description = factory.Faker("text", max_nb_chars=200)
    is_active = True


class ProductFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Product

    id = factory.LazyFunction(uuid.uuid4)
    name = factory.Sequence(lambda n: f"Product {n}")
    slug = factory.LazyAttribute(lambda o: f"{slugify(o.name)}-{str(o.id)[:8]}")
    description = factory.Faker("paragraph", nb_sentences=3)
    price = factory.LazyFunction(lambda: Decimal(f"{random.randint(10, 500)}.00"))
    stock_quantity = 10
    in_stock = True
    is_active = True
    is_featured = False

    category = factory.SubFactory(CategoryFactory)


class ProductOutOfStockFactory(ProductFactory):
    stock_quantity = 0
    in_stock = False


class ProductImageFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductImage

    product = factory.SubFactory(ProductFactory)
    url = factory.Sequence(lambda n: f"https://cdn.example.com/products/{n}.jpg")
    alt_text = factory.Faker("sentence", nb_words=5)
    order = 0


class ProductVariantFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductVariant

    product = factory.SubFactory(ProductFactory)
    name = factory.Iterator(["Small", "Medium", "Large"])
    sku = factory.Sequence(lambda n: f"SKU-{n:05d}")
    price = None
    stock_quantity = 5
    is_active = True


class WishlistItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = WishlistItem

    user = factory.SubFactory(UserFactory)
    product = factory.SubFactory(ProductFactory)


class CartFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Cart
        django_get_or_create = ("user",)

    user = factory.SubFactory(UserFactory)


class CartItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = CartItem

    cart = factory.SubFactory(CartFactory)
    product = factory.SubFactory(ProductFactory)
    variant = None
    quantity = 1


class OrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Order

    order_number = factory.Sequence(lambda n: f"ORD-1700000000000-T{n:04d}")
    buyer = factory.SubFactory(UserFactory)
    status = Order.STATUS_PENDING
    payment_status = Order.PAYMENT_PENDING
    subtotal = factory.LazyFunction(lambda: Decimal(f"{random.randint(50, 500)}.00"))
    shipping_amount = Decimal("0.00")
    tax_amount = Decimal("0.00")
    total_amount = factory.LazyAttribute(lambda o: o.subtotal + o.shipping_amount + o.tax_amount)
    currency = "USD"
    payment_method = "card"
    shipping_address = factory.LazyAttribute(
        lambda o: {
            "first_name": fake.first_name(),
            "last_name": fake.last_name(),
            "address_line_1": fake.street_address(),
            "city": fake.city(),
            "state": fake.state(),
            "postal_code": fake.postcode(),
            "country": fake.country(),
        }
    )


class PaidOrderFactory(OrderFactory):
    status = Order.STATUS_PROCESSING
    payment_status = Order.PAYMENT_PAID
    payment_intent_id = factory.Sequence(lambda n: f"pi_test_{n}")


class OrderItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    product = factory.SubFactory(ProductFactory)
    quantity = 1

    @factory.lazy_attribute
    def unit_price(self):
        return self.product.price

    @factory.lazy_attribute
    def total_price(self):
        return self.unit_price * self.quantity

    product_snapshot = factory.LazyAttribute(
        lambda o: {
            "name": o.product.name,
            "description": o.product.description,
            "image": "",
            "category": o.product.category.name if o.product.category else None,
        }
    )
