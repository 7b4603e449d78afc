import logging
from datetime import date, datetime
from functools import lru_cache
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException

from engine import account_for_date, account_period, get_daily_punches, predict_daily_punches
from models.config import ConfigStore, Settings
from models.schema import Config, DatabaseOperation, Punch
from utils.helper import PunchStore
from utils.pay_period import days, index_today, month_days_range
from utils.reminders import next_reminder

app = FastAPI()


@lru_cache()
def get_settings() -> Settings:
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    return settings


@lru_cache()
def get_config_store() -> ConfigStore:
    return ConfigStore(get_settings().config_path)


@lru_cache()
def get_store() -> PunchStore:
    return PunchStore.from_url(get_settings().database_url)


def get_config(config_store: ConfigStore = Depends(get_config_store)) -> Config:
    return config_store.config


def _load_window(store: PunchStore, config: Config, today: date) -> Dict[str, List[Punch]]:
    start, end = month_days_range(config.first_day_of_month, today)
    return store.load(start, end)


@app.post("/punch")
def receive_punch(timestamp: Optional[datetime] = None, store: PunchStore = Depends(get_store)):
    result = store.insert(timestamp or datetime.now())
    return {"status": result.value, "message": punch_status(result)}


@app.delete("/punch")
def remove_punch(timestamp: datetime, store: PunchStore = Depends(get_store)):
    result = store.remove(timestamp)
    if result is None:
        raise HTTPException(status_code=404, detail="Punch not found")
    return {"status": result.value}


@app.get("/days/{day}")
def read_day(day: date, store: PunchStore = Depends(get_store), config: Config = Depends(get_config)):
    now = datetime.now()
    punches = _load_window(store, config, day)
    accounting = account_for_date(day, punches, config, today=now.date(), now=now)
    return {
        "day": day.isoformat(),
        "punches": [punch.model_dump(mode="json") for punch in predict_daily_punches(day, punches, config)],
        "accounting": accounting.model_dump(mode="json", by_alias=True),
    }


@app.get("/period")
def read_period(store: PunchStore = Depends(get_store), config: Config = Depends(get_config)):
    now = datetime.now()
    today = now.date()
    start, end = month_days_range(config.first_day_of_month, today)
    punches = _load_window(store, config, today)
    period_days = days(config.first_day_of_month, today)
    daily = get_daily_punches(punches, config, today)
    accounting = account_period(period_days, punches, config, today=today, now=now)
    return {
        "start": start.isoformat(),
        "end": end.isoformat(),
        "indexToday": index_today(config.first_day_of_month, today),
        "days": [
            {
                "day": day,
                "punches": [punch.model_dump(mode="json") for punch in daily(day)],
                "accounting": accounting[day].model_dump(mode="json", by_alias=True),
            }
            for day in period_days
        ],
    }


@app.get("/config")
def read_config(config: Config = Depends(get_config)):
    return config.model_dump(mode="json", by_alias=True)


@app.get("/reminders/next")
def read_next_reminder(store: PunchStore = Depends(get_store), config: Config = Depends(get_config)):
    reminder = run_reminder_check(store, config, datetime.now())
    return reminder.model_dump(mode="json") if reminder else None


def run_reminder_check(store: PunchStore, config: Config, now: datetime):
    today = now.date()
    punches = _load_window(store, config, today)
    logging.info(f"Running reminder check for {today.isoformat()}")
    reminder = next_reminder(today, predict_daily_punches(today, punches, config), config)
    if reminder is None:
        logging.info("No punch left to remind today.")
    elif reminder.at < now:
        logging.warning(f"Punch {reminder.slot} was expected at {reminder.at:%H:%M} and is still missing")
    else:
        logging.info(f"Next reminder '{reminder.title}' at {reminder.at:%H:%M}")
    return reminder


def punch_status(result: DatabaseOperation) -> str:
    return "Punch received." if result == DatabaseOperation.INSERTED else "Punch already recorded."
