# ==============================================================================
# run.py
# ------------------------------------------------------------------------------
# The main entry point to launch the Flask application.
# ==============================================================================

from merchant_hero import create_app, db
from merchant_hero.models import UploadRecord

# Create the Flask application instance using the factory function
app = create_app()

@app.shell_context_processor
def make_shell_context():
    """Provides a shell context for the `flask shell` command."""
    return {
        'db': db,
        'UploadRecord': UploadRecord,
    }

if __name__ == '__main__':
    app.run(debug=True)
