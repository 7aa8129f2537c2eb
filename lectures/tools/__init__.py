from .classify import classify_reading, explain_classification
from .normalize import normalize_mass, order_groups, CANONICAL_ORDER
from .shape import build_informations, build_response
from .labels import slot_label, slot_icon, color_hex, book_name, excerpt
from .tabs import TabController
