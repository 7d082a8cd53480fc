"""Materialise a MapState as a Leaflet document through folium."""

from __future__ import annotations

from typing import TYPE_CHECKING

import folium

from ..config import settings
from .styles import RouteStyle

if TYPE_CHECKING:
    from .state import MapState


def numbered_icon(label: str, style: RouteStyle) -> folium.DivIcon:
    size = style.marker_size
    html = (
        f'<div style="background-color: {style.color}; color: white; border-radius: 50%; '
        f"width: {size}px; height: {size}px; display: flex; align-items: center; "
        f"justify-content: center; font-weight: bold; font-size: {style.font_size}px; "
        f'border: 2px solid white; box-shadow: 0 2px 5px rgba(0,0,0,0.3);">{label}</div>'
    )
    return folium.DivIcon(
        html=html,
        icon_size=(size, size),
        icon_anchor=(size // 2, size // 2),
        class_name="custom-marker",
    )


def build_map(state: "MapState") -> folium.Map:
    fmap = folium.Map(
        location=list(state.center),
        zoom_start=state.zoom,
        tiles=None,
        min_zoom=settings.min_zoom,
        max_zoom=settings.max_zoom,
    )
    folium.TileLayer(
        tiles=settings.tile_url,
        attr=settings.tile_attribution,
        name="OpenStreetMap",
        min_zoom=settings.min_zoom,
        max_zoom=settings.max_zoom,
    ).add_to(fmap)

    # Routes first so markers stay on top.
    for route in state.routes:
        style = route.style
        folium.PolyLine(
            route.path,
            color=style.color,
            weight=style.weight,
            opacity=style.opacity,
            dash_array=style.dash_array,
            tooltip=style.label,
        ).add_to(fmap)

    for marker in state.markers:
        folium.Marker(
            list(marker.position),
            icon=numbered_icon(marker.label, marker.style),
            popup=folium.Popup(marker.popup_html, max_width=300) if marker.popup_html else None,
        ).add_to(fmap)

    if state.viewport is not None:
        pad = state.viewport.padding
        fmap.fit_bounds(state.viewport.bounds.as_leaflet(), padding=(pad, pad))
    return fmap
