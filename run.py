import os

from puzzle_app import create_app
from puzzle_app.config import AppConfig

app = create_app(AppConfig.from_mapping(os.environ))

if __name__ == '__main__':
    app.run(debug=True)
