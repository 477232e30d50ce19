"""
Utilidades de fechas
====================

El API de familias entrega `fechaNacimiento` en formatos variados:
- "1990-05-20T00:00:00.000Z" (ISO de Prisma)
- "1990-05-20"
- "20/05/1990", "20.05.1990"
- "1990"
- "", None → sin fecha

Se usa para calcular la edad de cada persona y la edad promedio de la familia.
"""

import re
from datetime import date, datetime
from typing import Optional, Union, List


class DateResolver:
    """
    Parser tolerante de fechas de nacimiento.

    Uso:
        resolver = DateResolver()
        resolver.resolve("1990-05-20T00:00:00.000Z")  # date(1990, 5, 20)
        resolver.age("1990-05-20", today=date(2020, 1, 1))  # 29
    """

    PATTERNS = {
        # ISO: 1990-05-20, 1990-05-20T00:00:00.000Z
        'iso': r'^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$',

        # Formato latino: 20/05/1990, 20.05.1990, 20-05-1990
        'latin': r'^(\d{1,2})[-./](\d{1,2})[-./](\d{4})$',

        # Solo año: 1990
        'year': r'^(\d{4})$',
    }

    def __init__(self):
        self._patterns = {
            name: re.compile(pattern)
            for name, pattern in self.PATTERNS.items()
        }

    def resolve(self, date_input: Union[str, date, None]) -> Optional[date]:
        """
        Interpretar una fecha de nacimiento.

        Returns:
            date o None si la fecha no se puede interpretar
        """
        if date_input is None:
            return None

        if isinstance(date_input, datetime):
            return date_input.date()
        if isinstance(date_input, date):
            return date_input

        text = str(date_input).strip()
        if not text:
            return None

        try:
            match = self._patterns['iso'].match(text)
            if match:
                year, month, day = (int(g) for g in match.groups())
                return date(year, month, day)

            match = self._patterns['latin'].match(text)
            if match:
                day, month, year = (int(g) for g in match.groups())
                return date(year, month, day)

            match = self._patterns['year'].match(text)
            if match:
                return date(int(match.group(1)), 1, 1)
        except ValueError:
            # 1990-02-31, año 0000 y similares
            return None

        return None

    def age(self, date_input: Union[str, date, None], today: Optional[date] = None) -> Optional[int]:
        """Edad en años cumplidos, o None sin fecha"""
        born = self.resolve(date_input)
        if born is None:
            return None

        today = today or date.today()
        years = today.year - born.year
        if (today.month, today.day) < (born.month, born.day):
            years -= 1
        return years


# Singleton instance
_resolver: Optional[DateResolver] = None

def get_resolver() -> DateResolver:
    """Obtener la instancia de DateResolver"""
    global _resolver
    if _resolver is None:
        _resolver = DateResolver()
    return _resolver


def resolve_date(date_input: Union[str, date, None]) -> Optional[date]:
    return get_resolver().resolve(date_input)


def calculate_age(date_input: Union[str, date, None], today: Optional[date] = None) -> Optional[int]:
    return get_resolver().age(date_input, today=today)


def average_age(dates: List[Union[str, date, None]], today: Optional[date] = None) -> float:
    """Edad promedio de las personas con fecha conocida (0 si ninguna)"""
    ages = [a for a in (calculate_age(d, today=today) for d in dates) if a is not None]
    if not ages:
        return 0
    return sum(ages) / len(ages)
