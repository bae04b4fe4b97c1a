"""Two sessions racing on one subject: no lost updates, creation races resolved."""
from decimal import Decimal

from storefront.data.models.cart import CartModel
from storefront.data.models.order import OrderModel
from storefront.data.models.user import UserModel
from storefront.services.cart_service import CartService
from storefront.services.identity_service import IdentitySyncService
from storefront.services.order_service import OrderService


def _once(action):
    """Runs action the first time the returned hook is called."""
    fired = []

    def hook():
        if not fired:
            fired.append(True)
            action()

    return hook


class TestInterleavedCartWrites:
    def test_add_between_read_and_write_is_not_lost(self, open_session, catalog):
        session_a, session_b = open_session(), open_session()
        IdentitySyncService(session_a).sync_profile({"sub": "u"})
        cart_a = CartService(session_a, catalog)
        cart_b = CartService(session_b, catalog)
        cart_a.add_item("u", 1, 1)

        other_add = _once(lambda: cart_b.add_item("u", 1, 3))
        real_update = cart_a.repo.update_cart_version

        def update_after_other_add(**kwargs):
            other_add()
            return real_update(**kwargs)

        cart_a.repo.update_cart_version = update_after_other_add

        cart = cart_a.add_item("u", 1, 2)

        assert cart.items[0].quantity == 6
        assert cart_b.get_cart("u").items[0].quantity == 6

    def test_interleaved_new_lines_both_kept(self, open_session, catalog):
        session_a, session_b = open_session(), open_session()
        IdentitySyncService(session_a).sync_profile({"sub": "u"})
        cart_a = CartService(session_a, catalog)
        cart_b = CartService(session_b, catalog)
        cart_a.add_item("u", 1, 1)

        other_add = _once(lambda: cart_b.add_item("u", 3, 1))
        real_update = cart_a.repo.update_cart_version

        def update_after_other_add(**kwargs):
            other_add()
            return real_update(**kwargs)

        cart_a.repo.update_cart_version = update_after_other_add

        cart = cart_a.add_item("u", 2, 1)

        assert sorted(i.product_id for i in cart.items) == [1, 2, 3]
        assert cart_b.get_item_count("u") == 3

    def test_checkout_picks_up_line_added_mid_checkout(self, open_session, catalog, notifier):
        session_a, session_b = open_session(), open_session()
        IdentitySyncService(session_a).sync_profile({"sub": "u"})
        CartService(session_a, catalog).add_item("u", 1, 1)
        cart_b = CartService(session_b, catalog)
        orders_a = OrderService(session_a, notification_service=notifier)

        other_add = _once(lambda: cart_b.add_item("u", 2, 1))
        real_add_order = orders_a.repo.add_order

        def add_order_after_other_add(order):
            other_add()
            return real_add_order(order)

        orders_a.repo.add_order = add_order_after_other_add

        order = orders_a.place_order("u", "1 Main St", "555-0100")

        assert sorted(i.product_id for i in order.items) == [1, 2]
        assert order.total == Decimal("15.00")
        assert cart_b.get_item_count("u") == 0
        assert session_b.query(OrderModel).count() == 1


class TestCreationRaces:
    def test_first_login_race_takes_update_path(self, open_session):
        session_a, session_b = open_session(), open_session()
        identity_a = IdentitySyncService(session_a)
        identity_b = IdentitySyncService(session_b)

        other_login = _once(
            lambda: identity_b.sync_profile({"sub": "u", "email": "old@example.com", "name": "Ada"})
        )
        real_get_user = identity_a.repo.get_user
        calls = []

        def get_user_racing(subject_id):
            calls.append(subject_id)
            if len(calls) == 1:
                other_login()
                return None
            return real_get_user(subject_id)

        identity_a.repo.get_user = get_user_racing

        user = identity_a.sync_profile({"sub": "u", "email": "new@example.com"})

        assert user.email == "new@example.com"
        assert user.display_name == "Ada"
        session_b.expire_all()
        assert session_b.query(UserModel).count() == 1
        assert session_b.get(UserModel, "u").email == "new@example.com"

    def test_cart_creation_race_uses_existing_cart(self, open_session, catalog):
        session_a, session_b = open_session(), open_session()
        IdentitySyncService(session_a).sync_profile({"sub": "u"})
        cart_a = CartService(session_a, catalog)
        cart_b = CartService(session_b, catalog)

        created = []
        real_get_cart = cart_a.repo.get_cart_by_subject

        def get_cart_racing(subject_id):
            if not created:
                created.append(cart_b.get_or_create_cart(subject_id))
                return None
            return real_get_cart(subject_id)

        cart_a.repo.get_cart_by_subject = get_cart_racing

        cart = cart_a.add_item("u", 1, 2)

        assert cart.id == created[0].id
        assert [(i.product_id, i.quantity) for i in cart.items] == [(1, 2)]
        assert session_b.query(CartModel).count() == 1
