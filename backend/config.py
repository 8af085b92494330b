import os

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(basedir, 'ledger.sqlite3')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Create tables and seed the built-in templates on startup
    LEDGER_AUTO_INIT = os.environ.get('LEDGER_AUTO_INIT', '1') not in ('0', 'false', 'False')
    # Open-ended games: minimum rows offered, and empty rows kept below the last written one
    DYNAMIC_ROUND_FLOOR = int(os.environ.get('DYNAMIC_ROUND_FLOOR', '1'))
    DYNAMIC_ROUND_EXTEND = int(os.environ.get('DYNAMIC_ROUND_EXTEND', '1'))
