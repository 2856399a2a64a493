from svelte_unsafe_html.cli import app

if __name__ == "__main__":
    app()
