from flask import Blueprint

bp = Blueprint('api', __name__)

# Import routes and forms at the bottom
from merchant_hero.api import routes, forms
