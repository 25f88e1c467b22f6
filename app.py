from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_socketio import SocketIO, emit
from ridematch import config
from ridematch.system import RideShareSystem
import logging
import math
import time

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = config.SECRET_KEY
CORS(app, origins=config.CORS_ORIGINS)
socketio = SocketIO(app, cors_allowed_origins=config.CORS_ORIGINS, async_mode=config.SOCKETIO_ASYNC_MODE)

# Global system instance
system = RideShareSystem()
system.initialize_sample_data()


class BadRequest(ValueError):
    pass


def _json_body():
    return request.get_json(silent=True) or {}


def _int_field(data, key):
    value = data.get(key)
    if value is None:
        raise BadRequest(f"'{key}' is required")
    # JSON true/false would pass int()
    if isinstance(value, bool):
        raise BadRequest(f"'{key}' must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise BadRequest(f"'{key}' must be an integer")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"'{key}' must be an integer")


def _float_field(data, key, default):
    value = data.get(key, default)
    if isinstance(value, bool):
        raise BadRequest(f"'{key}' must be a number")
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise BadRequest(f"'{key}' must be a number")
    if not math.isfinite(value):
        raise BadRequest(f"'{key}' must be a number")
    return value


def _error(message, status):
    return jsonify({'success': False, 'error': message}), status


def broadcast_system_update():
    """Broadcast system update to all connected clients"""
    try:
        socketio.emit('system_update', {
            'type': 'full_update',
            'data': system.get_state(),
            'timestamp': time.time()
        })
    except Exception:
        logger.exception("Error broadcasting update")


@app.errorhandler(BadRequest)
def handle_bad_request(e):
    return _error(str(e), 400)


@app.errorhandler(404)
def handle_not_found(e):
    return _error('Endpoint not found', 404)


@app.route('/health')
def health_check():
    return jsonify({
        'status': 'healthy',
        'service': 'RideMatch Dispatch',
        'graph_nodes': system.graph.vertex_count,
        'total_drivers': len(system.list_drivers()),
        'available_drivers': len(system.list_available_drivers()),
        'timestamp': time.time()
    })


@app.route('/api/init', methods=['POST'])
def init_system():
    """Reset the system to the sample city and drivers"""
    try:
        logger.info("API: Initializing system")
        system.initialize_sample_data()
        broadcast_system_update()
        return jsonify({
            'success': True,
            'message': 'System initialized successfully',
            'system': system.get_state()
        })
    except Exception as e:
        logger.exception("Error initializing system")
        return _error(str(e), 500)


@app.route('/api/system/state', methods=['GET'])
def get_system_state():
    return jsonify({'success': True, 'system': system.get_state()})


@app.route('/api/graph', methods=['GET'])
def get_graph():
    return jsonify({'success': True, 'data': system.graph.to_dict()})


@app.route('/api/nodes/<int:node_id>', methods=['GET'])
def get_node(node_id):
    node = system.graph.get_node(node_id)
    if node is None:
        return _error('Node not found', 404)
    return jsonify({
        'success': True,
        'data': {
            'node': node.to_dict(),
            'adjacent': [edge.to_dict() for edge in system.graph.get_adjacent_nodes(node_id)]
        }
    })


@app.route('/api/path/shortest', methods=['POST'])
def shortest_path():
    data = _json_body()
    source = _int_field(data, 'source')
    destination = _int_field(data, 'destination')

    if not system.graph.node_exists(source) or not system.graph.node_exists(destination):
        return _error('Invalid source or destination node', 400)

    route = system.shortest_path(source, destination)
    if not route.found:
        return jsonify({'success': False, 'error': 'No path found', 'data': route.to_dict()})

    return jsonify({'success': True, 'data': route.to_dict()})


@app.route('/api/drivers', methods=['GET'])
def list_drivers():
    return jsonify({
        'success': True,
        'data': [driver.to_dict() for driver in system.list_drivers()]
    })


@app.route('/api/drivers/<driver_id>', methods=['GET'])
def get_driver(driver_id):
    driver = system.get_driver(driver_id)
    if driver is None:
        return _error('Driver not found', 404)
    return jsonify({'success': True, 'data': driver.to_dict()})


@app.route('/api/driver/add', methods=['POST'])
def add_driver():
    """Add a new driver"""
    data = _json_body()
    if not data.get('name'):
        raise BadRequest("'name' is required")
    location = _int_field(data, 'location')
    if not system.graph.node_exists(location):
        return _error('Invalid location', 400)

    rating = _float_field(data, 'rating', 5.0)
    # route ids are strings, so ids given as numbers are stored as strings too
    driver_id = str(data['id']) if data.get('id') is not None else None

    logger.info(f"API: Adding driver {data['name']} at location {location}")
    driver = system.add_driver(
        name=data['name'],
        location=location,
        vehicle=data.get('vehicle', 'Sedan'),
        rating=rating,
        driver_id=driver_id
    )
    if driver is None:
        return _error('Driver already exists', 409)

    broadcast_system_update()
    return jsonify({'success': True, 'data': driver.to_dict()})


@app.route('/api/drivers/<driver_id>/location', methods=['PUT'])
def update_driver_location(driver_id):
    location = _int_field(_json_body(), 'location')
    if not system.graph.node_exists(location):
        return _error('Invalid location', 400)
    if not system.update_driver_location(driver_id, location):
        return _error('Driver not found', 404)

    broadcast_system_update()
    return jsonify({
        'success': True,
        'message': 'Driver location updated',
        'data': system.get_driver(driver_id).to_dict()
    })


@app.route('/api/drivers/<driver_id>/availability', methods=['PUT'])
def update_driver_availability(driver_id):
    data = _json_body()
    if not isinstance(data.get('available'), bool):
        raise BadRequest("'available' must be true or false")
    if not system.set_driver_availability(driver_id, data['available']):
        return _error('Driver not found', 404)

    broadcast_system_update()
    return jsonify({
        'success': True,
        'message': 'Driver availability updated',
        'data': system.get_driver(driver_id).to_dict()
    })


@app.route('/api/drivers/<driver_id>/complete', methods=['POST'])
def complete_trip(driver_id):
    dropoff = _int_field(_json_body(), 'dropoff')
    if not system.graph.node_exists(dropoff):
        return _error('Invalid dropoff location', 400)
    if not system.complete_trip(driver_id, dropoff):
        return _error('Driver not found', 404)

    broadcast_system_update()
    return jsonify({'success': True, 'data': system.get_driver(driver_id).to_dict()})


@app.route('/api/drivers/<driver_id>', methods=['DELETE'])
def remove_driver(driver_id):
    if not system.remove_driver(driver_id):
        return _error('Driver not found', 404)

    broadcast_system_update()
    return jsonify({'success': True, 'message': f'Driver {driver_id} removed'})


def _ride_fields():
    data = _json_body()
    if not data.get('requester_id'):
        raise BadRequest("'requester_id' is required")
    return _int_field(data, 'pickup'), _int_field(data, 'destination'), str(data['requester_id'])


@app.route('/api/ride/request', methods=['POST'])
def request_ride():
    """Match a ride immediately"""
    pickup, destination, requester_id = _ride_fields()
    logger.info(f"API: Ride request from {requester_id}, pickup {pickup}, destination {destination}")

    result = system.request_ride(pickup, destination, requester_id)
    if result.success:
        broadcast_system_update()
    return jsonify(result.to_dict())


@app.route('/api/ride/enqueue', methods=['POST'])
def enqueue_ride():
    pickup, destination, requester_id = _ride_fields()
    ride_request = system.enqueue_ride(pickup, destination, requester_id)

    broadcast_system_update()
    return jsonify({
        'success': True,
        'data': ride_request.to_dict(),
        'queue_size': system.dispatch.queue_size()
    })


@app.route('/api/ride/process', methods=['POST'])
def process_ride():
    """Match the oldest queued ride"""
    result = system.process_next_ride()
    if result.success:
        broadcast_system_update()
    return jsonify(result.to_dict())


@app.route('/api/analytics', methods=['GET'])
def get_analytics():
    return jsonify({'success': True, 'analytics': system.get_analytics()})


@app.route('/api/analytics/demand', methods=['GET'])
def get_demand():
    return jsonify({'success': True, 'data': system.analyze_demand().to_dict()})


@socketio.on('connect')
def handle_connect():
    logger.info("Client connected")
    emit('connected', {'message': 'Connected to RideMatch', 'timestamp': time.time()})


@socketio.on('disconnect')
def handle_disconnect(reason=None):
    logger.info("Client disconnected")


if __name__ == '__main__':
    print("\n" + "=" * 50)
    print("RIDEMATCH DISPATCH SYSTEM")
    print("=" * 50)
    print(f"Starting server on {config.HOST}:{config.PORT}")
    print(f"- Locations: 0-{system.graph.vertex_count - 1}")
    print(f"- Drivers: {', '.join(d.id for d in system.list_drivers())}")
    print("=" * 50 + "\n")

    socketio.run(app, debug=False, host=config.HOST, port=config.PORT, allow_unsafe_werkzeug=True)
