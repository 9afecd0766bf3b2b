"""Gradio UI for the Promptcraft image prompt builder."""

import logging

import gradio as gr

from promptcraft.core.config import MAX_REFERENCE_IMAGES, config
from promptcraft.core.models import (
    ASPECT_RATIOS,
    COMPOSITIONS,
    DEFAULT_ASPECT_RATIO,
    LIGHTINGS,
    NO_OPTION,
    STYLES,
)

from .handlers import (
    add_reference_images,
    clear_reference_images,
    generate_image,
    login,
    logout,
    retry_generation,
    update_prompt_preview,
)
from .models import UIState

logger = logging.getLogger(__name__)


def create_ui() -> gr.Blocks:
    """Create the Gradio UI.

    Returns:
        Gradio Blocks app
    """
    app = gr.Blocks(title="Promptcraft")

    with app:
        # Session state - one instance per user
        ui_state = gr.State(UIState())

        gr.Markdown(
            """
            # Promptcraft
            ### AI image prompt builder
            """
        )

        with gr.Group(visible=True) as login_panel:
            gr.Markdown("### Log in\n*Your key is kept in this browser session only.*")
            api_key_input = gr.Textbox(
                label="OpenAI API Key",
                type="password",
                placeholder="sk-...",
            )
            login_btn = gr.Button("Log in", variant="primary")
            login_status = gr.Markdown(value="")

        with gr.Column(visible=False) as main_panel:
            with gr.Row():
                logout_btn = gr.Button("Log out", variant="secondary", size="sm")

            with gr.Row():
                with gr.Column(scale=1):
                    gr.Markdown("### Prompt")
                    prompt_input = gr.Textbox(
                        label="Prompt",
                        placeholder="Describe the image you want to generate...",
                        lines=4,
                    )

                    with gr.Row():
                        style_dropdown = gr.Dropdown(
                            label="Style", choices=list(STYLES), value=NO_OPTION
                        )
                        composition_dropdown = gr.Dropdown(
                            label="Composition", choices=list(COMPOSITIONS), value=NO_OPTION
                        )
                        lighting_dropdown = gr.Dropdown(
                            label="Lighting", choices=list(LIGHTINGS), value=NO_OPTION
                        )

                    aspect_ratio_radio = gr.Radio(
                        label="Aspect Ratio",
                        choices=[(f"{label} ({key})", key) for key, label in ASPECT_RATIOS.items()],
                        value=DEFAULT_ASPECT_RATIO,
                    )

                    prompt_preview = gr.Textbox(
                        label="Final Prompt Preview",
                        interactive=False,
                        lines=3,
                    )

                    with gr.Accordion("Reference Images", open=False):
                        gr.Markdown(
                            f"*Up to {MAX_REFERENCE_IMAGES} images (PNG, JPEG or WebP, "
                            f"5MB max each)*"
                        )
                        reference_upload = gr.File(
                            label="Upload",
                            file_count="multiple",
                            file_types=["image"],
                            type="filepath",
                        )
                        reference_gallery = gr.Gallery(
                            label="Attached",
                            columns=5,
                            height=160,
                            object_fit="contain",
                        )
                        reference_errors = gr.Markdown(value="")
                        clear_refs_btn = gr.Button("Clear References", size="sm")

                    generate_btn = gr.Button("Generate Image", variant="primary", size="lg")

                with gr.Column(scale=1):
                    gr.Markdown("### Result")
                    image_output = gr.Image(
                        label="Generated Image",
                        type="filepath",
                        interactive=False,
                        height=480,
                    )
                    status_output = gr.Markdown(value="*Ready to generate images*")
                    with gr.Row():
                        retry_btn = gr.Button("Retry", visible=False)
                        download_btn = gr.DownloadButton("Download", visible=False)

        # Event handlers

        login_btn.click(
            fn=login,
            inputs=[api_key_input, ui_state],
            outputs=[login_status, login_panel, main_panel, api_key_input, ui_state],
        )
        api_key_input.submit(
            fn=login,
            inputs=[api_key_input, ui_state],
            outputs=[login_status, login_panel, main_panel, api_key_input, ui_state],
        )

        logout_btn.click(
            fn=logout,
            inputs=[ui_state],
            outputs=[
                login_status,
                login_panel,
                main_panel,
                image_output,
                status_output,
                download_btn,
                ui_state,
            ],
        )

        preview_inputs = [prompt_input, style_dropdown, composition_dropdown, lighting_dropdown]
        for component in preview_inputs:
            component.change(
                fn=update_prompt_preview,
                inputs=preview_inputs,
                outputs=[prompt_preview],
            )

        reference_upload.upload(
            fn=add_reference_images,
            inputs=[reference_upload, ui_state],
            outputs=[reference_gallery, reference_errors, reference_upload, ui_state],
        )
        clear_refs_btn.click(
            fn=clear_reference_images,
            inputs=[ui_state],
            outputs=[reference_gallery, reference_errors, ui_state],
        )

        generation_outputs = [
            image_output,
            status_output,
            generate_btn,
            retry_btn,
            download_btn,
            ui_state,
        ]
        generate_btn.click(
            fn=generate_image,
            inputs=[
                prompt_input,
                style_dropdown,
                composition_dropdown,
                lighting_dropdown,
                aspect_ratio_radio,
                ui_state,
            ],
            outputs=generation_outputs,
        )
        retry_btn.click(
            fn=retry_generation,
            inputs=[ui_state],
            outputs=generation_outputs,
        )

    return app


def main():
    """Main entry point for the application."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info("Starting Promptcraft...")
    logger.info(f"Relay URL: {config.relay_url}")

    app = create_ui()

    logger.info(f"Launching Gradio UI on {config.gradio_server_name}:{config.gradio_server_port}")

    app.launch(
        server_name=config.gradio_server_name,
        server_port=config.gradio_server_port,
        share=config.gradio_share,
        show_error=True,
        inbrowser=False,
    )


if __name__ == "__main__":
    main()
