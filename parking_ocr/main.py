"""
Parking Receipt Scanner - Main Streamlit UI

Upload parking receipt photos, extract the date and cost of each with
OCR, and export everything with thumbnails to Excel.

Features:
- Multi-file upload
- Tesseract OCR with optional preprocessing
- Records kept across sessions in local storage
- Excel export with embedded receipt images
- Confirmed clear of all stored data
"""

import logging
import sys
from pathlib import Path

import pandas as pd
import streamlit as st

# Add project directory to path for `streamlit run parking_ocr/main.py`
sys.path.insert(0, str(Path(__file__).parent.parent))

from parking_ocr.config import get_config, validate_system_requirements
from parking_ocr.errors import ExportError
from parking_ocr.export.excel import XLSX_MIME_TYPE, ExcelExporter
from parking_ocr.images.loader import decode_data_url
from parking_ocr.ocr.extractor import TesseractExtractor
from parking_ocr.ocr.preprocessor import PreprocessingLevel
from parking_ocr.pipeline import BatchProcessor
from parking_ocr.storage.backends import JsonFileStorage
from parking_ocr.storage.store import RecordStore

# Configure logging
logging.basicConfig(
    level=getattr(logging, get_config().log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

IMAGE_TYPES = ["png", "jpg", "jpeg", "gif", "bmp", "tiff", "tif", "webp"]


@st.cache_resource
def get_store() -> RecordStore:
    """Create the record store once per server process."""
    config = get_config()
    storage = JsonFileStorage(config.storage.data_dir, key=config.storage.storage_key)
    return RecordStore(storage)


def init_session_state():
    """Initialize Streamlit session state."""
    if "config" not in st.session_state:
        st.session_state.config = get_config()

    if "system_validated" not in st.session_state:
        st.session_state.system_validated = False

    if "validation_results" not in st.session_state:
        st.session_state.validation_results = None

    if "last_failures" not in st.session_state:
        st.session_state.last_failures = []


def validate_system():
    """Validate system requirements on startup."""
    if not st.session_state.system_validated:
        with st.spinner("Validating system requirements..."):
            st.session_state.validation_results = validate_system_requirements()
            st.session_state.system_validated = True

    return st.session_state.validation_results


def show_validation_status():
    """Display system validation status."""
    results = st.session_state.validation_results
    if not results:
        return

    if not results["tesseract"]["installed"]:
        st.error(
            "⚠️ **Tesseract not found!** OCR will not work.\n\n"
            "Install with:\n"
            "- macOS: `brew install tesseract`\n"
            "- Ubuntu: `sudo apt install tesseract-ocr`\n"
            "- Windows: Download from [GitHub](https://github.com/UB-Mannheim/tesseract/wiki)"
        )

    if not results["storage"]["writable"]:
        st.warning(f"⚠️ {results['storage']['message']}")

    if not results["python_deps"]["installed"]:
        st.error(results["python_deps"]["message"])


def render_sidebar():
    """Render the settings sidebar."""
    config = st.session_state.config

    with st.sidebar:
        st.header("⚙️ Settings")

        st.subheader("OCR Settings")

        preprocessing_options = {
            PreprocessingLevel.NONE: "None (fastest)",
            PreprocessingLevel.LIGHT: "Light (contrast)",
            PreprocessingLevel.STANDARD: "Standard (for poor photos)",
        }
        levels = list(preprocessing_options.keys())
        default_level = PreprocessingLevel.from_name(config.preprocessing_level)

        st.selectbox(
            "Preprocessing Level",
            options=levels,
            index=levels.index(default_level),
            format_func=lambda x: preprocessing_options[x],
            key="preprocessing_level",
        )

        st.text_input(
            "OCR Language",
            value=config.tesseract.language,
            key="ocr_language",
            help="Tesseract language code, e.g. eng",
        )

        st.divider()

        st.subheader("System Status")

        if st.button("🔄 Refresh Status"):
            st.session_state.system_validated = False
            st.rerun()

        results = st.session_state.validation_results or {}

        tesseract = results.get("tesseract", {})
        if tesseract.get("installed"):
            st.success(f"✅ {tesseract.get('version') or 'Tesseract installed'}")
        else:
            st.error("❌ Tesseract not found")

        storage = results.get("storage", {})
        if storage.get("message"):
            st.caption(storage["message"])


def render_upload_section(store: RecordStore):
    """Render the upload control and run the batch."""
    st.header("📄 Upload Receipts")

    uploaded_files = st.file_uploader(
        "Choose parking receipt images",
        type=IMAGE_TYPES,
        accept_multiple_files=True,
        help="Each new batch replaces the receipts currently stored",
    )

    if not uploaded_files:
        return

    if store.current():
        st.caption("Scanning will replace the receipts currently stored. Export them first to keep them.")

    if st.button("🔍 Scan Receipts", type="primary"):
        config = st.session_state.config
        extractor = TesseractExtractor(
            tesseract_config=config.tesseract,
            preprocessing_level=st.session_state.get("preprocessing_level", PreprocessingLevel.NONE),
        )
        processor = BatchProcessor(
            extractor,
            store,
            language=st.session_state.get("ocr_language") or config.tesseract.language,
            max_file_bytes=config.max_file_size_bytes,
        )

        progress = st.progress(0.0, text="Starting...")

        def on_progress(done: int, total: int, name: str):
            progress.progress(done / total, text=f"Scanned {name} ({done}/{total})")

        with st.spinner("🔄 Scanning all files... Please wait."):
            result = processor.process(uploaded_files, on_progress=on_progress)

        st.session_state.last_failures = result.failures
        st.success(f"Scanned {len(result.records)} of {len(uploaded_files)} receipts")

    for failure in st.session_state.last_failures:
        if failure.stage == "read":
            st.warning(f"⚠️ {failure.name} could not be read and was skipped: {failure.message}")
        else:
            st.warning(f"⚠️ OCR failed for {failure.name}, stored without date and cost: {failure.message}")


def render_actions_section(store: RecordStore):
    """Render export and clear actions."""
    records = store.current()
    config = st.session_state.config

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("📤 Export to Excel")
        if not records:
            st.info("Scan receipts to enable export")
        else:
            try:
                content = ExcelExporter(config.export).export(records)
            except ExportError as e:
                st.error(f"Export failed: {e}")
                logger.exception("Excel export failed")
            else:
                st.download_button(
                    "⬇️ Download Excel File",
                    data=content,
                    file_name=config.export.file_name,
                    mime=XLSX_MIME_TYPE,
                    use_container_width=True,
                )

    with col2:
        st.subheader("🗑️ Clear All Data")
        confirmed = st.checkbox(
            "Are you sure you want to clear all scanned data?",
            key="confirm_clear",
        )
        st.button(
            "Clear All Data",
            disabled=not (confirmed and records),
            on_click=clear_records,
            args=(store,),
            use_container_width=True,
        )
        if st.session_state.pop("cleared", False):
            st.success("All scanned data cleared")


def clear_records(store: RecordStore):
    """Clear the store and untick the confirmation for the next time."""
    store.clear()
    st.session_state.last_failures = []
    st.session_state.confirm_clear = False
    st.session_state.cleared = True


def render_records_section(store: RecordStore):
    """Render the list of stored receipts."""
    records = store.current()

    st.header("🧾 Parsed Data")

    if not records:
        st.info("No receipts stored yet")
        return

    table = pd.DataFrame(
        [{"Date": record.date, "Cost": record.cost} for record in records]
    )
    table.index = table.index + 1
    st.dataframe(table, use_container_width=True)

    incomplete = sum(1 for record in records if not (record.has_date and record.has_cost))
    if incomplete:
        st.caption(f"{incomplete} receipt(s) are missing a date or cost")

    for record in records:
        col1, col2 = st.columns([1, 3])
        with col1:
            try:
                _, content = decode_data_url(record.image)
                st.image(content, width=120)
            except Exception as e:
                st.caption(f"Preview unavailable: {e}")
        with col2:
            st.markdown(f"📅 **Date:** {record.date} | 💰 **Cost:** {record.cost}")


def main():
    """Main application entry point."""
    st.set_page_config(
        page_title="Parking Receipt Scanner",
        page_icon="🅿️",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    init_session_state()

    st.title("🅿️ Parking Receipt Scanner")
    st.markdown(
        "Scan parking receipts with OCR, review the dates and costs, "
        "and export them to Excel with receipt thumbnails."
    )

    validate_system()
    show_validation_status()

    store = get_store()
    if store.load_warning:
        st.warning(f"⚠️ {store.load_warning}")

    render_sidebar()

    st.divider()
    render_upload_section(store)

    st.divider()
    render_actions_section(store)

    st.divider()
    render_records_section(store)


if __name__ == "__main__":
    main()
