# acaishop/services/store_service.py
from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from acaishop.data.models.store import StoreModel
from acaishop.data.models.store_config import StoreConfigModel
from acaishop.domain.schemas import WEEK_DAYS
from acaishop.repos.store_repo import StoreRepo
from acaishop.utils.settings import STORE_TIMEZONE
from acaishop.utils.logging import get_logger

logger = get_logger(__name__)

DAY_NAMES = {
    "monday": "Segunda-feira",
    "tuesday": "Terça-feira",
    "wednesday": "Quarta-feira",
    "thursday": "Quinta-feira",
    "friday": "Sexta-feira",
    "saturday": "Sábado",
    "sunday": "Domingo",
}

DEFAULT_OPERATING_HOURS = {
    "monday": {"open": True, "hours": "14:00 - 22:00"},
    "tuesday": {"open": True, "hours": "14:00 - 22:00"},
    "wednesday": {"open": True, "hours": "14:00 - 22:00"},
    "thursday": {"open": True, "hours": "14:00 - 22:00"},
    "friday": {"open": True, "hours": "14:00 - 23:00"},
    "saturday": {"open": True, "hours": "14:00 - 23:00"},
    "sunday": {"open": True, "hours": "14:00 - 22:00"},
}


def _to_minutes(hhmm: str) -> int:
    hour, minute = hhmm.strip().split(":")
    return int(hour) * 60 + int(minute)


def _split_hours(hours: str) -> tuple[str, str]:
    opening, closing = hours.split(" - ")
    return opening.strip(), closing.strip()


def _special_date_for(config: StoreConfigModel, day: str) -> dict | None:
    for entry in config.special_dates or []:
        if str(entry.get("date")) == day:
            return entry
    return None


def _next_opening(hours: dict, weekday: int) -> str:
    """Looks at the following seven days for the first open one."""
    for offset in range(1, 8):
        day = WEEK_DAYS[(weekday + offset) % 7]
        entry = hours.get(day) or {}
        if entry.get("open") and entry.get("hours"):
            opening, _ = _split_hours(entry["hours"])
            return f"Abriremos {DAY_NAMES[day]} às {opening}"
    return "Consulte nossos horários"


def store_status(config: StoreConfigModel, now: datetime | None = None) -> dict:
    """
    Open/closed state of a store at `now` (store local time).

    Manual close wins, then today's special date, then the weekly schedule.
    """
    if now is None:
        now = datetime.now(ZoneInfo(STORE_TIMEZONE))

    if not config.is_open:
        return {"is_open": False, "message": "Loja temporariamente fechada", "next_opening": None}

    hours = config.operating_hours or {}
    day_hours = hours.get(WEEK_DAYS[now.weekday()]) or {}

    special = _special_date_for(config, now.date().isoformat())
    if special is not None:
        if not special.get("open"):
            return {
                "is_open": False,
                "message": special.get("description") or "Loja fechada hoje",
                "next_opening": _next_opening(hours, now.weekday()),
            }
        # open special date: its own hours replace the weekday's
        day_hours = {"open": True, "hours": special.get("hours") or day_hours.get("hours")}

    if not day_hours.get("open") or not day_hours.get("hours"):
        return {
            "is_open": False,
            "message": "Fechado hoje",
            "next_opening": _next_opening(hours, now.weekday()),
        }

    opening, closing = _split_hours(day_hours["hours"])
    current = now.hour * 60 + now.minute

    if _to_minutes(opening) <= current < _to_minutes(closing):
        return {"is_open": True, "message": f"Aberto hoje: {day_hours['hours']}", "next_opening": None}

    if current < _to_minutes(opening):
        return {
            "is_open": False,
            "message": f"Abriremos hoje às {opening}",
            "next_opening": f"Hoje às {opening}",
        }

    return {
        "is_open": False,
        "message": "Fechado agora",
        "next_opening": _next_opening(hours, now.weekday()),
    }


def status_text(status: dict) -> str:
    if status["is_open"]:
        return "Aberto agora"
    if status.get("next_opening"):
        return f"Fechado • {status['next_opening']}"
    return "Fechado"


def _ordered_days(hours: dict) -> list[tuple[str, dict]]:
    return [(day, hours[day]) for day in WEEK_DAYS if day in hours]


def format_operating_hours(config: StoreConfigModel) -> str:
    hours = config.operating_hours or {}
    if not hours:
        return "Horário não disponível"

    lines = []
    for day, entry in _ordered_days(hours):
        if entry.get("open"):
            lines.append(f"{DAY_NAMES[day]}: {entry.get('hours')}")
        else:
            lines.append(f"{DAY_NAMES[day]}: Fechado")
    return "\n".join(lines)


def simplified_operating_hours(config: StoreConfigModel) -> str:
    hours = config.operating_hours or {}
    if not hours:
        return "Horário não disponível"

    open_days = [(day, entry) for day, entry in _ordered_days(hours) if entry.get("open")]
    if not open_days:
        return "Fechado todos os dias"

    standard = open_days[0][1].get("hours")
    if any(entry.get("hours") != standard for _, entry in open_days):
        return format_operating_hours(config)

    if len(open_days) == 7:
        return f"Todos os dias: {standard}"

    indices = [WEEK_DAYS.index(day) for day, _ in open_days]
    consecutive = all(b == a + 1 for a, b in zip(indices, indices[1:]))
    if consecutive and len(indices) > 1:
        first, last = DAY_NAMES[open_days[0][0]], DAY_NAMES[open_days[-1][0]]
        return f"{first} a {last}: {standard}"

    names = ", ".join(DAY_NAMES[day] for day, _ in open_days)
    return f"{names}: {standard}"


def default_config(name: str, delivery_fee: Decimal = Decimal("0.00")) -> StoreConfigModel:
    return StoreConfigModel(
        name=name,
        logo_url="",
        theme_color="#8B5CF6",
        delivery_fee=delivery_fee,
        is_open=True,
        operating_hours={day: dict(entry) for day, entry in DEFAULT_OPERATING_HOURS.items()},
        special_dates=[],
        next_order_number=1,
    )


class StoreService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = StoreRepo(db)

    def create_store(self, slug: str, name: str, delivery_fee: Decimal = Decimal("0.00")) -> StoreModel:
        if self.repo.get_by_slug(slug):
            raise ValueError(f"Loja '{slug}' já existe")

        store = self.repo.create_store(StoreModel(slug=slug, name=name), default_config(name, delivery_fee))
        logger.info(f"Store {store.slug} created ({store.id})")
        return store

    def list_stores(self) -> list[StoreModel]:
        return self.repo.list_stores()

    def get_store_by_slug(self, slug: str) -> StoreModel:
        store = self.repo.get_by_slug(slug)
        if not store or not store.active:
            raise LookupError(f"Loja '{slug}' não encontrada")
        return store

    def get_config(self, store: StoreModel) -> StoreConfigModel:
        config = self.repo.get_config(store.id)
        if config is None:
            # stores created before config rows existed
            config = default_config(store.name)
            config.store_id = store.id
            config = self.repo.save_config(config)
        return config

    def save_config(self, store: StoreModel, data: dict) -> StoreConfigModel:
        config = self.repo.get_config(store.id) or StoreConfigModel(store_id=store.id)

        for key, value in data.items():
            setattr(config, key, value)
        config.last_updated = datetime.now(timezone.utc)

        saved = self.repo.save_config(config)
        logger.info(f"Store config saved for {store.slug}")
        return saved

    def status(self, store: StoreModel, now: datetime | None = None) -> dict:
        config = self.get_config(store)
        result = store_status(config, now)
        result["status_text"] = status_text(result)
        result["hours_summary"] = simplified_operating_hours(config)
        return result

    def is_open(self, store: StoreModel, now: datetime | None = None) -> bool:
        return store_status(self.get_config(store), now)["is_open"]

    def reset_order_counter(self, store: StoreModel) -> dict:
        self.get_config(store)
        self.repo.reset_order_counter(store.id)
        logger.info(f"Order counter reset for {store.slug}")
        return {"store": store.slug, "next_order_number": 1}
