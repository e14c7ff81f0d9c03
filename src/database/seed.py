"""
Initial user snapshot loaded into an empty store and restored on reset
"""

from datetime import date
from typing import Any, Dict, List

_SEED_ROWS = [
    ("Ivan", "Petrov", date(1985, 3, 12)),
    ("Maria", "Ivanova", date(1990, 7, 24)),
    ("Alexey", "Smirnov", date(1978, 11, 2)),
    ("Olga", "Kuznetsova", date(1995, 1, 30)),
    ("Dmitry", "Popov", date(1988, 5, 17)),
    ("Anna", "Sokolova", date(1992, 9, 9)),
    ("Sergey", "Lebedev", date(1980, 12, 25)),
    ("Elena", "Kozlova", date(1987, 4, 14)),
    ("Nikolay", "Novikov", date(1975, 6, 6)),
    ("Tatiana", "Morozova", date(1999, 2, 28)),
    ("Pavel", "Volkov", date(1983, 8, 19)),
    ("Natalia", "Solovyova", date(1991, 10, 3)),
    ("Andrey", "Vasiliev", date(1986, 1, 11)),
    ("Yulia", "Zaitseva", date(1994, 3, 21)),
    ("Boris", "Pavlov", date(1970, 7, 7)),
    ("Vera", "Semenova", date(1997, 5, 5)),
    ("Kirill", "Golubev", date(1989, 9, 29)),
    ("Zhanna", "Vinogradova", date(1993, 12, 12)),
    ("Artem", "Bogdanov", date(1984, 2, 14)),
    ("Xenia", "Fedorova", date(1996, 6, 18)),
]


def seed_users() -> List[Dict[str, Any]]:
    """Seed users with ids 1..20 and emails workingemail-<id>@gmail.com"""
    return [
        {
            "id": user_id,
            "firstName": first_name,
            "lastName": last_name,
            "dayOfBirth": day_of_birth,
            "email": f"workingemail-{user_id}@gmail.com",
        }
        for user_id, (first_name, last_name, day_of_birth) in enumerate(_SEED_ROWS, start=1)
    ]
