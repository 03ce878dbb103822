"""Date range resolution for Awareness API ``dates`` parameters."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from statsburner.dates.overlap import detect_overlaps
from statsburner.domain.exceptions import (
    API_ERROR_MESSAGES,
    DuplicateRangeError,
    MalformedDateError,
)
from statsburner.domain.models import (
    DateResolution,
    DateSpec,
    DateType,
    ParametrizedDateSpec,
    RawDateSpec,
    coerce_date_spec,
)
from statsburner.utils import calendar

# A normalized spec is either a literal span token or (unit, offset).
_Normalized = Union[str, Tuple[DateType, int]]


class DateRangeResolver:
    """Turns user supplied date specs into API ready date tokens.

    Ranges are expressed oldest first: a spec for ``2011-01-01`` with a one
    month offset resolves to ``2010-12-01,2011-01-01``.
    """

    def __init__(
        self,
        *,
        allow_duplicates: bool = False,
        today: Callable[[], date] = date.today,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._allow_duplicates = allow_duplicates
        self._today = today
        self.logger = logger or logging.getLogger(
            f"{__name__}.{self.__class__.__name__}"
        )

    def resolve(
        self,
        ranges: Sequence[Union[DateSpec, str]] = (),
        *,
        allow_duplicates: Optional[bool] = None,
    ) -> DateResolution:
        """Resolve ``ranges`` into tokens, skipping malformed specs.

        Raises ``DuplicateRangeError`` when any two tokens overlap and
        duplicates are not allowed.
        """

        specs: Sequence[Any] = ranges or [ParametrizedDateSpec(date=self._today())]

        normalized, errors = self._normalize(specs)
        tokens = tuple(
            self._build_token(key, value) for key, value in normalized.items()
        )

        allowed = self._allow_duplicates if allow_duplicates is None else allow_duplicates
        if not allowed:
            detected = detect_overlaps(tokens)
            if detected > 0:
                raise DuplicateRangeError(
                    context={"tokens": list(tokens), "overlaps": detected}
                )

        return DateResolution(tokens=tokens, errors=tuple(errors))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _normalize(
        self, specs: Sequence[Any]
    ) -> Tuple[Dict[str, _Normalized], List[MalformedDateError]]:
        normalized: Dict[str, _Normalized] = {}
        errors: List[MalformedDateError] = []

        for raw in specs:
            spec = self._coerce(raw)
            if isinstance(spec, MalformedDateError):
                errors.append(spec)
                continue

            if isinstance(spec, RawDateSpec):
                token = spec.token.strip()
                text = token.split(",", 1)[0] if spec.is_span else token
                value: _Normalized = token if spec.is_span else (DateType.MONTH, 1)
            else:
                text = spec.date
                value = (spec.type, spec.offset)

            parsed = calendar.parse_date(text)
            if parsed is None:
                error = MalformedDateError(
                    f"Malformed date '{text}'", context={"spec": spec.model_dump()}
                )
                self.logger.warning("date_spec_rejected", extra={"date": text})
                errors.append(error)
                continue

            # Later specs for the same date win but keep the first position.
            normalized[calendar.format_date(parsed)] = value

        return normalized, errors

    def _coerce(self, raw: Any) -> Union[DateSpec, MalformedDateError]:
        try:
            return coerce_date_spec(raw)
        except TypeError as exc:
            message = str(exc)
        except ValidationError as exc:
            # Error code 0 of the API table covers unknown units.
            if any(error["loc"][:1] == ("type",) for error in exc.errors()):
                message = API_ERROR_MESSAGES[0]
            else:
                message = f"Malformed date spec {raw!r}"

        self.logger.warning("date_spec_rejected", extra={"spec": repr(raw)})
        return MalformedDateError(message, context={"spec": repr(raw)})

    @staticmethod
    def _build_token(key: str, value: _Normalized) -> str:
        if isinstance(value, str):
            return value
        unit, offset = value
        if offset == 0:
            return key
        finish = date.fromisoformat(key)
        start = calendar.shift(finish, unit, -offset)
        return f"{calendar.format_date(start)},{key}"
