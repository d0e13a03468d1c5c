from catering.models.menu_item import MenuItem
from catering.models.promo_code import PromoCode
from catering.models.order import Order, OrderStatus
