"""HTTP route definitions for the exporter."""

from __future__ import annotations

from typing import Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST

from app.schemas import HealthResponse, SensorReadingOut, SensorsResponse
from datastore.sensor_cache import SensorCacheReader, build_default_cache
from services.exposition import render_metrics
from settings import get_settings

router = APIRouter()


def get_reader() -> SensorCacheReader:
    return build_default_cache().reader()


def get_locations() -> Dict[str, str]:
    return get_settings().locations


@router.get(
    "/metrics",
    response_class=Response,
    summary="Latest sensor readings in Prometheus text format.",
)
def metrics(
    reader: SensorCacheReader = Depends(get_reader),
    locations: Dict[str, str] = Depends(get_locations),
) -> Response:
    return Response(content=render_metrics(reader, locations), media_type=CONTENT_TYPE_LATEST)


@router.get(
    "/sensors",
    response_model=SensorsResponse,
    summary="Latest reading for every known sensor.",
)
def list_sensors(reader: SensorCacheReader = Depends(get_reader)) -> SensorsResponse:
    sensors = [
        SensorReadingOut.from_record(sensor_id, record)
        for sensor_id, record in reader.snapshot()
    ]
    return SensorsResponse(count=len(sensors), sensors=sensors)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
def healthcheck(reader: SensorCacheReader = Depends(get_reader)) -> HealthResponse:
    return HealthResponse(status="ok", sensors=len(reader.snapshot()))
