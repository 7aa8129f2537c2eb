# --- path shim (works for `python -m lectures.app` and `streamlit run lectures/app.py`) ---
from pathlib import Path
import sys
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
# -------------------------------------------------------------------------------

import os, logging
import argparse
import datetime as dt
import json
from dotenv import load_dotenv

from lectures.errors import StaleResultError, UpstreamUnavailable
from lectures.models import NormalizedResponse, ReadingVersion
from lectures.services.aelf import DEFAULT_ZONE, ZONES, get_readings
from lectures.services.loader import ReadingsLoader
from lectures.tools import TabController, book_name, color_hex, excerpt, slot_icon, slot_label

load_dotenv()

# ---------- Logging ----------
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"), format="%(levelname)s: %(message)s")
log = logging.getLogger("lectures")

WAIT_SECONDS = 30


def parse_day(value: str | None) -> dt.date:
    return dt.date.fromisoformat(value) if value else dt.date.today()


def day_title(data: NormalizedResponse) -> list[str]:
    info = data.informations
    extra = info.model_extra or {}
    lines = [extra.get(k) for k in ("ligne1", "ligne2", "ligne3") if extra.get(k)]
    return lines or [info.jour_liturgique_nom]


# ---------- CLI ----------
def print_readings(data: NormalizedResponse, *, full: bool = False) -> None:
    info = data.informations
    for line in day_title(data):
        print(line)
    print(f"[{info.date}] couleur: {info.couleur} · temps: {info.temps_liturgique}")

    for i, messe in enumerate(data.messes):
        groups = data.groups_for(i)
        if len(data.messes) > 1:
            print(f"\n=== {messe.nom or f'Messe {i + 1}'} ===")
        for group in groups:
            print(f"\n{slot_icon(group.type)} {slot_label(group.type)}")
            for v in group.versions:
                prefix = f"  ({v.version_index + 1}) " if group.has_multiple_versions else "  "
                print(prefix + " · ".join(p for p in (v.titre or v.intro_lue, v.reference) if p))
                if full:
                    print(excerpt(v.contenu, None))


def run_cli(day: dt.date, zone: str, *, as_json: bool = False, full: bool = False) -> int:
    try:
        data = get_readings(day, zone)
    except UpstreamUnavailable as e:
        print(f"Service indisponible: {e.message}", file=sys.stderr)
        for url, err in e.attempts:
            log.debug("  %s -> %s", url, err)
        return 1

    if as_json:
        print(json.dumps(data.model_dump(mode="json"), ensure_ascii=False, indent=2))
    else:
        print_readings(data, full=full)
    return 0


# ---------- Streamlit UI ----------
def render_reading(st, reading: ReadingVersion) -> None:
    heading = reading.titre or reading.intro_lue or slot_label(reading.type)
    st.subheader(f"{slot_icon(reading.type)} {heading}")
    if reading.reference:
        book = book_name(reading.reference)
        st.caption(f"{reading.reference} ({book})" if book else reading.reference)
    if reading.titre and reading.intro_lue:
        st.markdown(f"*{reading.intro_lue}*")
    if reading.refrain_psalmique:
        st.markdown(f"**Refrain :** {reading.refrain_psalmique}", unsafe_allow_html=True)
    if reading.verset_evangile:
        st.markdown(f"**Verset :** {reading.verset_evangile}", unsafe_allow_html=True)
    st.markdown(reading.contenu, unsafe_allow_html=True)


def run_ui(default_day: dt.date, default_zone: str):
    import streamlit as st

    st.set_page_config(page_title="Lectures du jour", page_icon="📖")

    if "day" not in st.session_state:
        st.session_state.day = default_day
    if "loader" not in st.session_state:
        st.session_state.loader = ReadingsLoader()
    if "tabs" not in st.session_state:
        st.session_state.tabs = TabController()
    loader: ReadingsLoader = st.session_state.loader
    tabs: TabController = st.session_state.tabs

    def _shift(days: int):
        st.session_state.day = st.session_state.day + dt.timedelta(days=days)

    def _retry():
        loader.request(st.session_state.day, st.session_state.zone, force=True)

    # sidebar: zone + calendar
    st.sidebar.header("📅 Date")
    zone_index = ZONES.index(default_zone) if default_zone in ZONES else 0
    st.sidebar.selectbox("Zone", ZONES, index=zone_index, key="zone")
    st.sidebar.date_input("Jour", key="day")

    col_prev, col_day, col_next, col_retry = st.columns([1, 4, 1, 1])
    col_prev.button("◀", on_click=_shift, args=(-1,), help="Jour précédent")
    col_next.button("▶", on_click=_shift, args=(1,), help="Jour suivant")
    col_retry.button("🔄", on_click=_retry, help="Rafraîchir")
    day, zone = st.session_state.day, st.session_state.zone
    col_day.markdown(f"**{day.strftime('%d/%m/%Y')}** · {zone}")

    loader.request(day, zone)
    try:
        with st.spinner("Chargement des lectures…"):
            data = loader.wait(WAIT_SECONDS)
    except StaleResultError:
        st.rerun()
    except UpstreamUnavailable as e:
        st.warning(f"Service indisponible, réessayez plus tard. {e.message}")
        st.button("Réessayer", on_click=_retry, key="retry-unavailable")
        st.stop()
    except Exception as e:
        log.exception("Readings failed for %s", day)
        st.error(f"Erreur lors du chargement des lectures: {e}")
        st.button("Réessayer", on_click=_retry, key="retry-error")
        st.stop()

    info = data.informations
    accent = color_hex(info.couleur)
    for n, line in enumerate(day_title(data)):
        st.markdown(f"<h{n + 1} style='color:{accent}'>{line}</h{n + 1}>", unsafe_allow_html=True)
    st.caption(f"Temps {info.temps_liturgique} · {info.semaine}".rstrip(" ·"))

    messe_index = 0
    if len(data.messes) > 1:
        messe_index = st.selectbox(
            "Messe",
            range(len(data.messes)),
            format_func=lambda i: data.messes[i].nom or f"Messe {i + 1}",
            key=f"messe-{day}-{zone}",
        )

    identity = (day.isoformat(), zone, messe_index)
    tabs.load(data.groups_for(messe_index), identity)
    if not tabs.groups:
        st.info("Aucune lecture pour cette messe.")
        return

    labels = tabs.tab_labels()
    choice = st.radio(
        "Lectures",
        range(len(labels)),
        format_func=lambda i: labels[i],
        index=tabs.active_group,
        horizontal=True,
        key=f"group-{identity}",
    )
    tabs.select_group(choice)

    group = tabs.groups[tabs.active_group]
    if group.has_multiple_versions:
        names = tabs.version_labels()
        version = st.selectbox(
            "Version",
            range(len(names)),
            format_func=lambda i: names[i],
            index=tabs.active_version(),
            key=f"version-{identity}-{tabs.active_group}",
        )
        tabs.select_version(version)

    st.markdown("---")
    render_reading(st, tabs.current())


# ---------- Entrypoint ----------
def main():
    parser = argparse.ArgumentParser(description="Lectures du jour: AELF Mass readings")
    parser.add_argument("--ui", action="store_true", help="Start the Streamlit UI")
    parser.add_argument("--date", help="YYYY-MM-DD (default: today)")
    parser.add_argument("--zone", default=DEFAULT_ZONE, help="AELF zone (default: %(default)s)")
    parser.add_argument("--json", action="store_true", help="Print the normalized response as JSON")
    parser.add_argument("--full", action="store_true", help="Print the reading texts")
    args = parser.parse_args()

    try:
        day = parse_day(args.date)
    except ValueError:
        parser.error(f"invalid date: {args.date}")

    if args.ui:
        run_ui(day, args.zone)
    else:
        sys.exit(run_cli(day, args.zone, as_json=args.json, full=args.full))

if __name__ == "__main__":
    main()
