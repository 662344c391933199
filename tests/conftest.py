"""Pytest configuration and fixtures for pyrsml tests."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable

import pytest

from pyrsml.io.config import ReaderConfig

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5)

# Plant "1" holds a primary root R1 (order 1) with a lateral R1.1 (order 2),
# a sub-lateral R1.1.1 (order 3) and a root R1.2 whose only polyline is
# empty; R1.2.1 sits below R1.2 and must never be read.
SPATIAL_RSML = """<?xml version="1.0" encoding="UTF-8"?>
<rsml xmlns:po="http://www.plantontology.org/xml-dtd/po.dtd">
  <metadata>
    <version>1.4</version>
    <unit>cm</unit>
    <resolution>300</resolution>
    <last-modified>today</last-modified>
    <software>smartroot</software>
    <user>tester</user>
    <file-key>plate01</file-key>
    <observation-hours>2.5, 1.0</observation-hours>
    <property-definitions>
      <property-definition>
        <label>length</label>
        <type>float</type>
        <unit>cm</unit>
      </property-definition>
      <property-definition>
        <label>angle</label>
      </property-definition>
    </property-definitions>
    <image>
      <name>plate01.jpg</name>
      <sha256>abc</sha256>
    </image>
  </metadata>
  <scene>
    <plant ID="1" label="col0">
      <root ID="R1" label="primary" po:accession="PO:0020127">
        <properties>
          <length>7.0</length>
          <angle>bad</angle>
        </properties>
        <geometry>
          <polyline>
            <point x="0" y="0"/>
            <point x="3" y="0"/>
            <point x="3" y="4"/>
          </polyline>
        </geometry>
        <functions>
          <function name="diameter">
            <sample>0.5</sample>
            <sample>x</sample>
            <sample>0.4</sample>
          </function>
        </functions>
        <annotations>
          <annotation name="tip">
            <point>3,4</point>
            <value>ok</value>
          </annotation>
        </annotations>
        <root ID="R1.1" label="lateral">
          <geometry>
            <polyline>
              <point x="3" y="1"/>
              <point x="5" y="1"/>
            </polyline>
          </geometry>
          <root ID="R1.1.1" label="lateral">
            <geometry>
              <polyline>
                <point x="4" y="1"/>
                <point x="4" y="2"/>
              </polyline>
            </geometry>
          </root>
        </root>
        <root ID="R1.2" label="empty">
          <geometry>
            <polyline/>
          </geometry>
          <root ID="R1.2.1" label="hidden">
            <geometry>
              <polyline>
                <point x="1" y="1"/>
                <point x="2" y="2"/>
              </polyline>
            </geometry>
          </root>
        </root>
      </root>
    </plant>
  </scene>
</rsml>
"""

# One root whose three points are reached at times 1, 2 and 3.
TEMPORAL_RSML = """<?xml version="1.0" encoding="UTF-8"?>
<rsml>
  <metadata>
    <unit>{unit}</unit>
    <resolution>{resolution}</resolution>
  </metadata>
  <scene>
    <plant ID="p1" label="plant">
      <root ID="{root_id}" label="primary">
        <geometry>
          <polyline>
            <point coord_t="1" coord_th="0" coord_x="0" coord_y="0" diameter="0.2" vx="0" vy="1"/>
            <point coord_t="2" coord_th="6" coord_x="0" coord_y="3" diameter="0.2" vx="0" vy="1"/>
            <point coord_t="3" coord_th="12" coord_x="4" coord_y="3" diameter="0.1" vx="1" vy="0"/>
          </polyline>
        </geometry>
      </root>
    </plant>
  </scene>
</rsml>
"""

SIMPLE_RSML = """<?xml version="1.0" encoding="UTF-8"?>
<rsml>
  <metadata>
    <unit>{unit}</unit>
    <resolution>{resolution}</resolution>
  </metadata>
  <scene>
    <plant ID="{plant_id}">
      <root ID="{root_id}">
        <geometry>
          <polyline>
            <point x="0" y="0"/>
            <point x="0" y="{length}"/>
          </polyline>
        </geometry>
      </root>
    </plant>
  </scene>
</rsml>
"""


@pytest.fixture
def fixed_now() -> datetime:
    """The instant returned by the injected clock."""
    return FIXED_NOW


@pytest.fixture
def reader_config(fixed_now: datetime) -> ReaderConfig:
    """Snapshot reader configuration with a fixed clock."""
    return ReaderConfig(clock=lambda: fixed_now)


@pytest.fixture
def write_rsml(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a function writing RSML text to ``tmp_path / name``."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def spatial_rsml_text() -> str:
    return SPATIAL_RSML


@pytest.fixture
def spatial_rsml_path(write_rsml: Callable[[str, str], Path]) -> Path:
    """Spatial RSML file whose capture date is only in its name (2018-05-13)."""
    return write_rsml("13_05_2018_HA01_R004_h053.rsml", SPATIAL_RSML)


@pytest.fixture
def temporal_rsml() -> Callable[..., str]:
    """Return a function rendering the spatio-temporal document."""

    def _render(unit: str = "mm", resolution: str = "300", root_id: str = "R1") -> str:
        return TEMPORAL_RSML.format(unit=unit, resolution=resolution, root_id=root_id)

    return _render


@pytest.fixture
def simple_rsml() -> Callable[..., str]:
    """Return a function rendering a one-plant, one-root spatial document."""

    def _render(
        unit: str = "cm",
        resolution: str = "300",
        plant_id: str = "1",
        root_id: str = "R1",
        length: float = 10.0,
    ) -> str:
        return SIMPLE_RSML.format(
            unit=unit, resolution=resolution, plant_id=plant_id, root_id=root_id, length=length
        )

    return _render
