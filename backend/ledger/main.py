from flask import Blueprint, jsonify, current_app

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the score ledger!'})

@main.route('/health')
def health():
    # Clients show the warning when storage fell back to memory
    return jsonify({
        'status': 'ok',
        'storage': {
            'persistent': bool(current_app.config.get('LEDGER_PERSISTENT')),
            'warning': current_app.config.get('LEDGER_STORAGE_WARNING'),
        },
    })
