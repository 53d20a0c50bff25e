import argparse
import logging
import math

from flask import Flask, jsonify, render_template_string, request

from wind_aggregate import aggregated_range
from wind_config import CURRENT_MAX_AGE, DB_FILE, HTTP_HOST, HTTP_PORT
from wind_errors import NoDataAvailable, PersistenceError
from wind_store import MeasurementStore

logger = logging.getLogger("wind_webserver")

app = Flask(__name__)

# Opened in main(), or replaced by tests
store = None

GRAPH_HISTORY_MINUTES = 60
GRAPH_INTERVAL_SECONDS = 60

HTML_TEMPLATE = '''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Wind Monitor</title>
    <style>
        body { font-family: Arial, sans-serif; margin: 0; padding: 20px; background-color: #f5f5f5; }
        .container { max-width: 800px; margin: 0 auto; background-color: white; padding: 20px; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
        h1 { color: #2c3e50; margin-top: 0; text-align: center; }
        .card { margin-bottom: 20px; padding: 15px; border-radius: 4px; background-color: #f9f9f9; box-shadow: 0 1px 3px rgba(0,0,0,0.1); }
        .wind-gauge { text-align: center; font-size: 28px; font-weight: bold; margin: 20px 0; }
        .chart-container { height: 300px; margin-top: 20px; }
        .last-updated { text-align: right; color: #7f8c8d; font-size: 0.8em; margin-top: 10px; }
        .settings { margin: 10px 0; padding: 10px; background-color: #f2f2f2; border-radius: 4px; }
        .settings input { width: 60px; padding: 4px; margin-right: 20px; }
    </style>
    <script src="https://cdnjs.cloudflare.com/ajax/libs/Chart.js/3.7.0/chart.min.js"></script>
</head>
<body>
    <div class="container">
        <h1>Wind Speed</h1>
        <div class="card">
            <div class="wind-gauge"><span id="current-wind">--</span> m/s</div>
            <div class="last-updated">Last updated: <span id="last-updated">Never</span></div>
        </div>
        <div class="card">
            <div class="settings">
                <label for="historyMinutes">History (minutes):</label>
                <input type="number" id="historyMinutes" min="1" max="4320" value="{{ graph_history_minutes }}">
                <label for="intervalSeconds">Bucket (seconds):</label>
                <input type="number" id="intervalSeconds" min="1" value="{{ graph_interval_seconds }}">
                <button id="updateHistory">Update</button>
            </div>
            <div class="chart-container"><canvas id="windChart"></canvas></div>
        </div>
    </div>
    <script>
        let windChart;

        function updateCurrentData() {
            fetch('/wind/current')
                .then(r => r.ok ? r.json() : null)
                .then(data => {
                    if (!data) {
                        document.getElementById('current-wind').textContent = '--';
                        return;
                    }
                    document.getElementById('current-wind').textContent = data.vel.toFixed(2);
                    document.getElementById('last-updated').textContent = new Date(data.ts * 1000).toLocaleString();
                })
                .catch(console.error);
        }

        function updateHistoryChart() {
            const duration = parseInt(document.getElementById('historyMinutes').value) * 60;
            const interval = parseInt(document.getElementById('intervalSeconds').value);
            fetch(`/wind/data_since?duration=${duration}&interval=${interval}`)
                .then(r => r.ok ? r.json() : [])
                .then(data => {
                    const labels = data.map(m => new Date(m.ts * 1000).toLocaleTimeString());
                    const values = data.map(m => m.vel);
                    if (windChart) {
                        windChart.data.labels = labels;
                        windChart.data.datasets[0].data = values;
                        windChart.update('none');
                        return;
                    }
                    const ctx = document.getElementById('windChart').getContext('2d');
                    windChart = new Chart(ctx, {
                        type: 'line',
                        data: { labels: labels, datasets: [{ label: 'Average (m/s)', data: values, borderColor: '#2980b9', tension: 0.1, fill: false }] },
                        options: { responsive: true, maintainAspectRatio: false, scales: { y: { beginAtZero: true } } }
                    });
                })
                .catch(console.error);
        }

        document.getElementById('updateHistory').addEventListener('click', updateHistoryChart);
        updateCurrentData();
        updateHistoryChart();
        setInterval(updateCurrentData, 2000);
        setInterval(updateHistoryChart, 30000);
    </script>
</body>
</html>'''


def _error(message, status):
    return jsonify({"error": message}), status


def _positive_arg(name):
    value = request.args.get(name)
    if value is None:
        raise ValueError(f"missing '{name}'")
    try:
        value = float(value)
    except ValueError:
        raise ValueError(f"'{name}' must be a number") from None
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"'{name}' must be a positive number")
    return value


@app.after_request
def allow_any_origin(response):
    response.headers["Access-Control-Allow-Origin"] = "*"
    return response


@app.errorhandler(NoDataAvailable)
def no_data(e):
    return _error(str(e), 404)


@app.errorhandler(PersistenceError)
def store_failure(e):
    logger.error("Store failure: %s", e)
    return _error("measurement store unavailable", 503)


@app.route('/')
def index():
    return render_template_string(HTML_TEMPLATE,
                                  graph_history_minutes=GRAPH_HISTORY_MINUTES,
                                  graph_interval_seconds=GRAPH_INTERVAL_SECONDS)


@app.route('/wind/current')
def current():
    return jsonify(store.current(CURRENT_MAX_AGE).to_dict())


@app.route('/wind/last_data')
def last_data():
    return jsonify(store.latest().to_dict())


@app.route('/wind/oldest_data')
def oldest_data():
    return jsonify(store.oldest().to_dict())


@app.route('/wind/data_since')
def data_since():
    try:
        duration = _positive_arg("duration")
        interval = _positive_arg("interval")
    except ValueError as e:
        return _error(str(e), 400)
    measurements = aggregated_range(store, duration, interval)
    return jsonify([m.to_dict() for m in measurements])


def main(argv=None):
    global store

    parser = argparse.ArgumentParser(prog="wind_webserver.py", description="Serve stored wind measurements over HTTP.")
    parser.add_argument('--db', type=str, default=DB_FILE, help=f"SQLite database file (default: {DB_FILE}).")
    parser.add_argument('--host', type=str, default=HTTP_HOST)
    parser.add_argument('--port', type=int, default=HTTP_PORT)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO,
                        format="[WIND_WEBSERVER at %(asctime)s] %(levelname)s: %(message)s",
                        datefmt="%Y-%m-%d %H:%M:%S")

    store = MeasurementStore(args.db)
    try:
        logger.info("Reading measurements from %s", args.db)
        logger.info("Starting Flask server on port %d...", args.port)
        app.run(host=args.host, port=args.port, debug=False)
    except KeyboardInterrupt:
        logger.info("Stopped by user.")
    finally:
        store.close()


if __name__ == "__main__":
    main()
