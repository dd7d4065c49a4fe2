"""Solar position and hour-angle equations.

Low precision formulas from Jean Meeus, *Astronomical Algorithms* (2nd ed.).
Solar transit is derived from right ascension and apparent sidereal time,
which accounts for the equation of time. Every time returned here is a
fractional hour of the UTC day the calculation was made for; ``None`` means
the sun never reaches the requested altitude on that day.
"""

import math
from dataclasses import dataclass
from datetime import date

SOLAR_HORIZON_ALTITUDE = -50 / 60  # refraction plus solar semi-diameter


def unwind_angle(angle: float) -> float:
    """Normalize an angle to [0, 360)."""
    return angle - 360.0 * math.floor(angle / 360.0)


def quadrant_shift_angle(angle: float) -> float:
    """Normalize an angle to [-180, 180]."""
    if -180 <= angle <= 180:
        return angle
    return angle - 360 * math.floor(angle / 360 + 0.5)


def normalize_to_scale(number: float, maximum: float) -> float:
    return number - maximum * math.floor(number / maximum)


def julian_day(year: int, month: int, day: int, hours: float = 0.0) -> float:
    """Julian day of a Gregorian calendar date (Meeus 7.1)."""
    y = year if month > 2 else year - 1
    m = month if month > 2 else month + 12
    d = day + hours / 24
    a = math.trunc(y / 100)
    b = math.trunc(2 - a + math.trunc(a / 4))
    i0 = math.trunc(365.25 * (y + 4716))
    i1 = math.trunc(30.6001 * (m + 1))
    return i0 + i1 + d + b - 1524.5


def julian_century(jd: float) -> float:
    """Julian centuries since J2000.0."""
    return (jd - 2451545.0) / 36525


def mean_solar_longitude(t: float) -> float:
    return unwind_angle(280.4664567 + 36000.76983 * t + 0.0003032 * t**2)


def mean_lunar_longitude(t: float) -> float:
    return unwind_angle(218.3165 + 481267.8813 * t)


def ascending_lunar_node_longitude(t: float) -> float:
    return unwind_angle(125.04452 - 1934.136261 * t + 0.0020708 * t**2 + t**3 / 450000)


def mean_solar_anomaly(t: float) -> float:
    return unwind_angle(357.52911 + 35999.05029 * t - 0.0001537 * t**2)


def solar_equation_of_the_center(t: float, anomaly: float) -> float:
    m = math.radians(anomaly)
    return (
        (1.914602 - 0.004817 * t - 0.000014 * t**2) * math.sin(m)
        + (0.019993 - 0.000101 * t) * math.sin(2 * m)
        + 0.000289 * math.sin(3 * m)
    )


def apparent_solar_longitude(t: float, mean_longitude: float) -> float:
    longitude = mean_longitude + solar_equation_of_the_center(t, mean_solar_anomaly(t))
    omega = 125.04 - 1934.136 * t
    return unwind_angle(longitude - 0.00569 - 0.00478 * math.sin(math.radians(omega)))


def mean_obliquity_of_the_ecliptic(t: float) -> float:
    return 23.439291 - 0.013004167 * t - 0.0000001639 * t**2 + 0.0000005036 * t**3


def apparent_obliquity_of_the_ecliptic(t: float, mean_obliquity: float) -> float:
    omega = 125.04 - 1934.136 * t
    return mean_obliquity + 0.00256 * math.cos(math.radians(omega))


def mean_sidereal_time(t: float) -> float:
    jd = t * 36525 + 2451545.0
    theta = (
        280.46061837
        + 360.98564736629 * (jd - 2451545)
        + 0.000387933 * t**2
        - t**3 / 38710000
    )
    return unwind_angle(theta)


def nutation_in_longitude(solar_lon: float, lunar_lon: float, node: float) -> float:
    return (
        -17.2 / 3600 * math.sin(math.radians(node))
        - 1.32 / 3600 * math.sin(2 * math.radians(solar_lon))
        - 0.23 / 3600 * math.sin(2 * math.radians(lunar_lon))
        + 0.21 / 3600 * math.sin(2 * math.radians(node))
    )


def nutation_in_obliquity(solar_lon: float, lunar_lon: float, node: float) -> float:
    return (
        9.2 / 3600 * math.cos(math.radians(node))
        + 0.57 / 3600 * math.cos(2 * math.radians(solar_lon))
        + 0.10 / 3600 * math.cos(2 * math.radians(lunar_lon))
        - 0.09 / 3600 * math.cos(2 * math.radians(node))
    )


def altitude_of_celestial_body(latitude: float, declination: float, hour_angle: float) -> float:
    phi = math.radians(latitude)
    delta = math.radians(declination)
    h = math.radians(hour_angle)
    return math.degrees(
        math.asin(math.sin(phi) * math.sin(delta) + math.cos(phi) * math.cos(delta) * math.cos(h))
    )


def interpolate(y2: float, y1: float, y3: float, n: float) -> float:
    """Interpolate a value from the previous (y1), current (y2) and next (y3) day."""
    a = y2 - y1
    b = y3 - y2
    c = b - a
    return y2 + (n / 2) * (a + b + n * c)


def interpolate_angles(y2: float, y1: float, y3: float, n: float) -> float:
    """Same as :func:`interpolate`, tolerant of the 360 degree wrap."""
    a = unwind_angle(y2 - y1)
    b = unwind_angle(y3 - y2)
    c = b - a
    return y2 + (n / 2) * (a + b + n * c)


@dataclass(frozen=True)
class SolarCoordinates:
    """Apparent position of the sun at 0h UT of a Julian day (degrees)."""

    declination: float
    right_ascension: float
    apparent_sidereal_time: float

    @classmethod
    def for_julian_day(cls, jd: float) -> "SolarCoordinates":
        t = julian_century(jd)
        solar_lon = mean_solar_longitude(t)
        lunar_lon = mean_lunar_longitude(t)
        node = ascending_lunar_node_longitude(t)
        apparent_lon = math.radians(apparent_solar_longitude(t, solar_lon))
        sidereal = mean_sidereal_time(t)
        delta_psi = nutation_in_longitude(solar_lon, lunar_lon, node)
        delta_epsilon = nutation_in_obliquity(solar_lon, lunar_lon, node)
        mean_obliquity = mean_obliquity_of_the_ecliptic(t)
        apparent_obliquity = math.radians(apparent_obliquity_of_the_ecliptic(t, mean_obliquity))

        declination = math.degrees(math.asin(math.sin(apparent_obliquity) * math.sin(apparent_lon)))
        right_ascension = unwind_angle(
            math.degrees(
                math.atan2(
                    math.cos(apparent_obliquity) * math.sin(apparent_lon),
                    math.cos(apparent_lon),
                )
            )
        )
        apparent_sidereal = sidereal + (
            delta_psi * 3600 * math.cos(math.radians(mean_obliquity + delta_epsilon))
        ) / 3600
        return cls(
            declination=declination,
            right_ascension=right_ascension,
            apparent_sidereal_time=apparent_sidereal,
        )


def approximate_transit(longitude: float, sidereal_time: float, right_ascension: float) -> float:
    """Transit as a fraction of the day (Meeus 15.2)."""
    lw = -longitude
    return normalize_to_scale((right_ascension + lw - sidereal_time) / 360, 1)


def corrected_transit(
    m0: float,
    longitude: float,
    sidereal_time: float,
    ra: float,
    prev_ra: float,
    next_ra: float,
) -> float:
    """Transit in hours, corrected by interpolated right ascension."""
    lw = -longitude
    theta = unwind_angle(sidereal_time + 360.985647 * m0)
    alpha = unwind_angle(interpolate_angles(ra, prev_ra, next_ra, m0))
    hour_angle = quadrant_shift_angle(theta - lw - alpha)
    delta_m = hour_angle / -360
    return (m0 + delta_m) * 24


def corrected_hour_angle(
    m0: float,
    altitude: float,
    latitude: float,
    longitude: float,
    after_transit: bool,
    sidereal_time: float,
    ra: float,
    prev_ra: float,
    next_ra: float,
    declination: float,
    prev_declination: float,
    next_declination: float,
) -> float | None:
    """Hours at which the sun crosses ``altitude``, or None if it never does."""
    lw = -longitude
    term1 = math.sin(math.radians(altitude)) - math.sin(math.radians(latitude)) * math.sin(
        math.radians(declination)
    )
    term2 = math.cos(math.radians(latitude)) * math.cos(math.radians(declination))
    if term2 == 0:
        return None
    cos_h0 = term1 / term2
    if not -1 <= cos_h0 <= 1:
        return None
    h0 = math.degrees(math.acos(cos_h0))
    m = m0 + h0 / 360 if after_transit else m0 - h0 / 360
    theta = unwind_angle(sidereal_time + 360.985647 * m)
    alpha = unwind_angle(interpolate_angles(ra, prev_ra, next_ra, m))
    delta = interpolate(declination, prev_declination, next_declination, m)
    hour_angle = theta - lw - alpha
    h = altitude_of_celestial_body(latitude, delta, hour_angle)
    denominator = (
        360
        * math.cos(math.radians(delta))
        * math.cos(math.radians(latitude))
        * math.sin(math.radians(hour_angle))
    )
    if denominator == 0:
        return None
    delta_m = (h - altitude) / denominator
    return (m + delta_m) * 24


class SolarTime:
    """Transit, sunrise and sunset of one UTC calendar day at a position."""

    def __init__(self, day: date, latitude: float, longitude: float) -> None:
        self.latitude = latitude
        self.longitude = longitude
        jd = julian_day(day.year, day.month, day.day)
        self.solar = SolarCoordinates.for_julian_day(jd)
        self.prev_solar = SolarCoordinates.for_julian_day(jd - 1)
        self.next_solar = SolarCoordinates.for_julian_day(jd + 1)

        self.approx_transit = approximate_transit(
            longitude, self.solar.apparent_sidereal_time, self.solar.right_ascension
        )
        self.transit = corrected_transit(
            self.approx_transit,
            longitude,
            self.solar.apparent_sidereal_time,
            self.solar.right_ascension,
            self.prev_solar.right_ascension,
            self.next_solar.right_ascension,
        )
        self.sunrise = self.hour_angle(SOLAR_HORIZON_ALTITUDE, after_transit=False)
        self.sunset = self.hour_angle(SOLAR_HORIZON_ALTITUDE, after_transit=True)

    def hour_angle(self, altitude: float, after_transit: bool) -> float | None:
        """Time the sun is at ``altitude`` before or after transit."""
        return corrected_hour_angle(
            self.approx_transit,
            altitude,
            self.latitude,
            self.longitude,
            after_transit,
            self.solar.apparent_sidereal_time,
            self.solar.right_ascension,
            self.prev_solar.right_ascension,
            self.next_solar.right_ascension,
            self.solar.declination,
            self.prev_solar.declination,
            self.next_solar.declination,
        )

    def afternoon(self, shadow_length: int) -> float | None:
        """Time an object's shadow is ``shadow_length`` times its height plus its noon shadow."""
        tangent = abs(self.latitude - self.solar.declination)
        inverse = shadow_length + math.tan(math.radians(tangent))
        altitude = math.degrees(math.atan(1.0 / inverse))
        return self.hour_angle(altitude, after_transit=True)
