"""
Streamlit web interface for sketch-to-website generation.

Provides a sketch input (uploaded drawing or recorded strokes), a generate
control, a sandboxed live preview and a zip download of the generated site.
"""

import json

import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

from webber.config import DEFAULT_MODELS, get_settings
from webber.controller import SketchController
from webber.export.packager import EXPORT_FILENAME
from webber.io.sketch_canvas import SketchCanvas
from webber.models import DEFAULT_PAGE_TYPE, DEFAULT_USER_PROMPT, StrokeColor
from webber.pipeline.generation import SiteGenerator

# Load environment variables
load_dotenv()

# Page configuration
st.set_page_config(
    page_title="Webber",
    page_icon="✏️",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: 700;
        margin-bottom: 1rem;
    }
    .sub-header {
        font-size: 1.2rem;
        color: #666;
        margin-bottom: 2rem;
    }
</style>
""", unsafe_allow_html=True)

PAGE_TYPES = ["Landing Page", "Portfolio", "Blog", "Dashboard", "E-commerce"]


def get_controller(provider: str, model_name: str, temperature: float) -> SketchController:
    """Session controller; rebuilt when the generation settings change."""
    settings = get_settings()
    key = (provider, model_name, temperature)

    if st.session_state.get("controller_key") != key:
        previous = st.session_state.get("controller")
        generator = SiteGenerator(
            provider=provider,
            model_name=model_name,
            temperature=temperature,
            max_tokens=settings.max_tokens,
            api_key=settings.api_key if provider == settings.provider else None,
        )
        st.session_state.controller = SketchController(
            generator,
            canvas=previous.canvas if previous else SketchCanvas(settings.canvas),
            state=previous.state if previous else None,
            preview=previous.preview if previous else None,
        )
        st.session_state.controller_key = key

    return st.session_state.controller


def sketch_section(controller: SketchController):
    """Load the sketch into the drawing surface."""
    st.header("✏️ Sketch")

    source = st.radio(
        "Sketch source",
        ["Upload drawing", "Stroke recording (JSON)"],
        horizontal=True
    )

    if source == "Upload drawing":
        sketch_file = st.file_uploader("Upload wireframe sketch", type=["png", "jpg", "jpeg"])
        if sketch_file:
            controller.canvas = SketchCanvas.from_image(
                sketch_file.getvalue(), config=controller.canvas.config
            )
    else:
        color = st.radio(
            "Default stroke color",
            [StrokeColor.PEN.name, StrokeColor.MARKER.name],
            horizontal=True,
            format_func=str.title
        )
        strokes_file = st.file_uploader("Upload strokes", type=["json"])
        if strokes_file:
            strokes = json.loads(strokes_file.getvalue())
            if isinstance(strokes, dict):
                strokes = strokes.get("strokes", [])
            canvas = SketchCanvas(controller.canvas.config)
            canvas.set_color(color)
            canvas.replay(strokes)
            controller.canvas = canvas

    st.image(controller.canvas.image, caption="What the model will see", width='stretch')


def generate_section(controller: SketchController, page_type: str, user_prompt: str):
    """Generate control with a busy state."""
    busy = controller.state.is_generating
    label = "✨ Magic..." if busy else "🚀 Generate"

    if st.button(label, type="primary", disabled=busy):
        with st.spinner("🔄 Generating website..."):
            controller.generate(page_type=page_type, user_prompt=user_prompt)

        if controller.state.last_error:
            st.error(f"❌ Error generating site: {controller.state.last_error}")


def preview_section(controller: SketchController):
    """Sandboxed preview with download and close actions."""
    site = controller.state.active_site
    if site is None:
        return

    st.divider()
    header_col, download_col, close_col = st.columns([6, 1, 1])

    with header_col:
        st.subheader("🖥️ Generated Website")

    with download_col:
        st.download_button(
            "⬇️ Download",
            data=controller.download(),
            file_name=EXPORT_FILENAME,
            mime="application/zip",
            key="download_site"
        )

    with close_col:
        if st.button("✖ Close", key="close_preview"):
            controller.close_preview()
            st.rerun()

    components.html(controller.preview.iframe_html(height=700), height=720, scrolling=False)

    with st.expander("View Source", expanded=False):
        html_tab, css_tab, js_tab = st.tabs(["HTML", "CSS", "JS"])
        with html_tab:
            st.code(site.html, language="html")
        with css_tab:
            st.code(site.css, language="css")
        with js_tab:
            st.code(site.js, language="javascript")


def main():
    """Main application entry point."""
    st.markdown('<div class="main-header">✏️ Webber</div>', unsafe_allow_html=True)
    st.markdown(
        '<div class="sub-header">Turn a wireframe sketch into a live website</div>',
        unsafe_allow_html=True
    )

    settings = get_settings()

    with st.sidebar:
        st.header("⚙️ Configuration")

        providers = list(DEFAULT_MODELS)
        provider = st.selectbox(
            "Provider",
            providers,
            index=providers.index(settings.provider) if settings.provider in providers else 0,
            help="Select the LLM provider for generation"
        )
        model_name = st.text_input("Model", value=settings.model_name or DEFAULT_MODELS[provider])

        temperature = st.slider(
            "Temperature",
            min_value=0.0,
            max_value=1.0,
            value=settings.temperature,
            step=0.1,
            help="Lower = more deterministic, Higher = more creative"
        )

        st.divider()

        page_type = st.selectbox(
            "Website type",
            PAGE_TYPES,
            index=PAGE_TYPES.index(DEFAULT_PAGE_TYPE)
        )
        user_prompt = st.text_area("Prompt", value=DEFAULT_USER_PROMPT)

    controller = get_controller(provider, model_name, temperature)

    sketch_section(controller)
    generate_section(controller, page_type, user_prompt)
    preview_section(controller)


if __name__ == "__main__":
    main()
