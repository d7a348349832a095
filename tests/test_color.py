import json

import pytest

from ledean.color import (
    HSV,
    RGB,
    SpiOrder,
    clear_hsv,
    clear_rgb,
    hsv_list_to_rgb,
    order_from_name,
    rgb_list_to_hsv,
)


def test_hsv_to_rgb_primaries():
    assert HSV(0.0, 1.0, 1.0).to_rgb() == RGB(255, 0, 0)
    assert HSV(120.0, 1.0, 1.0).to_rgb() == RGB(0, 255, 0)
    assert HSV(240.0, 1.0, 1.0).to_rgb() == RGB(0, 0, 255)


def test_hsv_to_rgb_mixed():
    rgb = HSV(311.0, 0.89, 0.75).to_rgb()
    assert abs(rgb.r - 190) <= 1
    assert abs(rgb.g - 20) <= 1
    assert abs(rgb.b - 160) <= 1


def test_hsv_add():
    c1 = HSV(0.0, 1.0, 0.5)
    c1.add(HSV(0.0, 1.0, 0.2))
    assert c1.h == pytest.approx(0.0, abs=1.0)
    assert c1.s == pytest.approx(1.0, abs=0.05)
    assert c1.v == pytest.approx(0.7, abs=0.05)


def test_hsv_sub():
    c1 = HSV(0.0, 1.0, 0.5)
    c1.sub(HSV(0.0, 1.0, 0.2))
    assert c1.h == pytest.approx(0.0, abs=1.0)
    assert c1.s == pytest.approx(1.0, abs=0.05)
    assert c1.v == pytest.approx(0.3, abs=0.05)


def test_rgb_to_hsv():
    assert RGB(255, 0, 0).to_hsv() == HSV(0.0, 1.0, 1.0)
    assert RGB(0, 255, 0).to_hsv() == HSV(120.0, 1.0, 1.0)
    assert RGB(0, 0, 255).to_hsv() == HSV(240.0, 1.0, 1.0)
    hsv = RGB(190, 20, 160).to_hsv()
    assert hsv.h == pytest.approx(311.0, abs=1.0)
    assert hsv.s == pytest.approx(0.89, abs=0.05)
    assert hsv.v == pytest.approx(0.75, abs=0.05)


def test_black_to_hsv_is_black():
    assert RGB(0, 0, 0).to_hsv() == HSV(0.0, 0.0, 0.0)


@pytest.mark.parametrize(
    "order, expected",
    [
        (SpiOrder.RGB, (50, 100, 150)),
        (SpiOrder.RBG, (50, 150, 100)),
        (SpiOrder.GRB, (100, 50, 150)),
        (SpiOrder.GBR, (100, 150, 50)),
        (SpiOrder.BRG, (150, 50, 100)),
        (SpiOrder.BGR, (150, 100, 50)),
    ],
)
def test_to_spi(order, expected):
    assert RGB(50, 100, 150).to_spi(order) == bytes(expected)


def test_to_spi_unknown_order_gives_zeros():
    assert RGB(50, 100, 150).to_spi(99) == bytes([0, 0, 0])


def test_rgb_add():
    c1 = RGB(10, 20, 30)
    c1.add(RGB(40, 50, 255))
    assert c1 == RGB(50, 70, 255)


def test_rgb_sub():
    c1 = RGB(15, 20, 30)
    c1.sub(RGB(5, 50, 15))
    assert c1 == RGB(10, 0, 15)


@pytest.mark.parametrize("name", ["BGR", "BRG", "GRB", "GBR", "RGB", "RBG"])
def test_order_from_name(name):
    assert order_from_name(name).name == name


def test_order_from_unknown_name_defaults_to_rgb():
    assert order_from_name("XYZ") is SpiOrder.RGB


def test_rgb_dict_and_str():
    rgb = RGB(1, 2, 3)
    assert rgb.to_dict() == {"r": 1, "g": 2, "b": 3}
    assert json.loads(str(rgb)) == rgb.to_dict()


def test_list_conversion_round_trip():
    leds = [RGB(255, 0, 0), RGB(0, 255, 0), RGB(0, 0, 255)]
    assert hsv_list_to_rgb(rgb_list_to_hsv(leds)) == leds


def test_clear_rgb_and_hsv():
    rgbs = [RGB(1, 2, 3), RGB(4, 5, 6)]
    hsvs = [HSV(10.0, 1.0, 1.0)]
    clear_rgb(rgbs)
    clear_hsv(hsvs)
    assert rgbs == [RGB(0, 0, 0), RGB(0, 0, 0)]
    assert hsvs == [HSV(0.0, 0.0, 0.0)]