import pytest


class TestRooms:
    def test_create_requires_admin(self, client, user_headers):
        response = client.post('/admin/room/newRoom', json={'RoomOptions': []}, headers=user_headers)

        assert response.status_code == 403

    def test_create(self, create_room):
        room = create_room({}, {'RoomName': 'Twin Saver', 'Price': 60, 'BedType': {'TwinBed': True}})

        first, second = room['RoomOptions']
        assert first['RoomName'] == 'Deluxe King'
        assert first['RoomAmenities'] == {'Wifi': True, 'CableTv': False, 'AirCondition': True,
                                          'FreeCancellation': False, 'NonSmoking': True}
        assert first['RoomMeals'] == {'Breakfast': True, 'Dinner': False, 'BreakfastAndDinner': False}
        assert second['BedType'] == {'SingleBed': False, 'TwinBed': True, 'QueenBed': False, 'KingBed': False}
        assert second['Price'] == 60

    def test_option_needs_a_price(self, client, admin_headers):
        response = client.post('/admin/room/newRoom', headers=admin_headers,
                               json={'RoomOptions': [{'RoomName': 'Free', 'NumberOfGuests': 1}]})

        assert response.status_code == 400

    def test_get_and_list(self, client, create_room):
        room = create_room()

        assert client.get(f'/admin/room/{room["_id"]}').get_json() == room
        assert client.get('/admin/room/allRooms').get_json() == [room]

    def test_get_missing(self, client):
        assert client.get('/admin/room/999').status_code == 404

    def test_rooms_by_hotel(self, client, create_room, create_hotel):
        listed = create_room()
        create_room()
        hotel = create_hotel(Rooms=[listed['_id']])

        response = client.get(f'/admin/room/byHotel/{hotel["_id"]}')

        assert [r['_id'] for r in response.get_json()] == [listed['_id']]

    def test_rooms_by_hotel_without_rooms(self, client, create_hotel):
        hotel = create_hotel()

        assert client.get(f'/admin/room/byHotel/{hotel["_id"]}').status_code == 404


class TestSearchRooms:
    @pytest.fixture
    def rooms(self, create_room):
        king = create_room()
        twin = create_room({'RoomName': 'Twin Saver', 'Price': 60, 'BedType': {'TwinBed': True},
                            'RoomAmenities': {'Wifi': False, 'CableTv': True}})
        return king, twin

    def test_by_name(self, client, rooms):
        response = client.get('/admin/room/searchRoomByName', query_string={'roomName': 'twin'})

        assert [r['_id'] for r in response.get_json()] == [rooms[1]['_id']]

    def test_by_name_requires_parameter(self, client):
        assert client.get('/admin/room/searchRoomByName').status_code == 400

    def test_by_price_is_exact(self, client, rooms):
        exact = client.get('/admin/room/searchRoomByPrice', query_string={'price': '100'})
        near = client.get('/admin/room/searchRoomByPrice', query_string={'price': '99'})

        assert [r['_id'] for r in exact.get_json()] == [rooms[0]['_id']]
        assert near.status_code == 404

    def test_by_price_must_be_numeric(self, client):
        response = client.get('/admin/room/searchRoomByPrice', query_string={'price': 'cheap'})

        assert response.status_code == 400

    def test_by_amenities_ands_flags(self, client, rooms):
        both = client.get('/admin/room/searchRoomByAmenities',
                          query_string={'roomAmenities.Wifi': 'true', 'roomAmenities.AirCondition': 'true'})
        none = client.get('/admin/room/searchRoomByAmenities',
                          query_string={'roomAmenities.Wifi': 'true', 'roomAmenities.CableTv': 'true'})

        assert [r['_id'] for r in both.get_json()] == [rooms[0]['_id']]
        assert none.status_code == 404

    def test_by_amenities_false_flag(self, client, rooms):
        response = client.get('/admin/room/searchRoomByAmenities', query_string={'roomAmenities.Wifi': 'false'})

        assert [r['_id'] for r in response.get_json()] == [rooms[1]['_id']]

    def test_by_amenities_without_filters_returns_everything(self, client, rooms):
        response = client.get('/admin/room/searchRoomByAmenities', query_string={'roomAmenities.Jacuzzi': 'true'})

        assert len(response.get_json()) == 2

    def test_by_bed_type(self, client, rooms):
        response = client.get('/admin/room/searchRoomByBedType', query_string={'KingBed': 'true'})

        assert [r['_id'] for r in response.get_json()] == [rooms[0]['_id']]

    def test_by_bed_type_ands_flags(self, client, rooms):
        response = client.get('/admin/room/searchRoomByBedType',
                              query_string={'KingBed': 'true', 'TwinBed': 'true'})

        assert response.status_code == 404

    def test_by_bed_type_requires_a_known_flag(self, client, rooms):
        response = client.get('/admin/room/searchRoomByBedType', query_string={'WaterBed': 'true'})

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Invalid bed type provided.'


class TestUpdateRoom:
    def test_existing_option_is_updated_in_place(self, client, admin_headers, create_room):
        room = create_room()
        option = dict(room['RoomOptions'][0], Price=150)

        response = client.patch(f'/admin/room/{room["_id"]}', json={'RoomOptions': [option]},
                                headers=admin_headers)

        updated = response.get_json()['RoomOptions']
        assert response.status_code == 200
        assert [(o['_id'], o['Price']) for o in updated] == [(option['_id'], 150)]

    def test_add_and_remove_options(self, client, admin_headers, create_room):
        room = create_room()
        new_option = {'RoomName': 'Suite', 'Price': 300, 'NumberOfGuests': 4}

        response = client.patch(f'/admin/room/{room["_id"]}', json={'RoomOptions': [new_option]},
                                headers=admin_headers)

        assert [o['RoomName'] for o in response.get_json()['RoomOptions']] == ['Suite']

    def test_unknown_option_id(self, client, admin_headers, create_room):
        room = create_room()
        option = dict(room['RoomOptions'][0], _id=999)

        response = client.patch(f'/admin/room/{room["_id"]}', json={'RoomOptions': [option]},
                                headers=admin_headers)

        assert response.status_code == 404

    def test_booked_option_cannot_be_removed(self, client, admin_headers, user_headers,
                                             create_room, create_hotel):
        room = create_room()
        hotel = create_hotel(Rooms=[room['_id']])
        client.post('/newBooking', headers=user_headers, json={
            'Hotel': hotel['_id'], 'Room': room['_id'],
            'CheckInDate': '2030-01-01', 'CheckOutDate': '2030-01-02', 'NumberOfGuests': 1,
        })

        response = client.patch(f'/admin/room/{room["_id"]}', headers=admin_headers,
                                json={'RoomOptions': [{'RoomName': 'Suite', 'Price': 300, 'NumberOfGuests': 4}]})

        assert response.status_code == 409
        assert client.get(f'/admin/room/{room["_id"]}').get_json() == room


class TestDeleteRoom:
    def test_delete_detaches_from_hotels(self, client, admin_headers, user_headers, create_room, create_hotel):
        room = create_room()
        hotel = create_hotel(Rooms=[room['_id']])

        response = client.delete(f'/admin/room/{room["_id"]}', headers=admin_headers)

        assert response.status_code == 200
        assert client.get(f'/admin/room/{room["_id"]}').status_code == 404
        assert client.get(f'/admin/hotel/{hotel["_id"]}', headers=user_headers).get_json()['Rooms'] == []

    def test_delete_with_bookings_is_rejected(self, client, admin_headers, user_headers,
                                              create_room, create_hotel):
        room = create_room()
        hotel = create_hotel(Rooms=[room['_id']])
        client.post('/newBooking', headers=user_headers, json={
            'Hotel': hotel['_id'], 'Room': room['_id'],
            'CheckInDate': '2030-01-01', 'CheckOutDate': '2030-01-02', 'NumberOfGuests': 1,
        })

        assert client.delete(f'/admin/room/{room["_id"]}', headers=admin_headers).status_code == 409


class TestAvailability:
    def test_availability_counts_overlapping_bookings(self, client, user_headers, create_room, create_hotel):
        room = create_room({'NumOfEmptyRooms': 3})
        hotel = create_hotel(Rooms=[room['_id']])
        for check_in, check_out in [('2030-03-01', '2030-03-04'), ('2030-03-02', '2030-03-03')]:
            client.post('/newBooking', headers=user_headers, json={
                'Hotel': hotel['_id'], 'Room': room['_id'],
                'CheckInDate': check_in, 'CheckOutDate': check_out, 'NumberOfGuests': 1,
            })

        busy = client.get(f'/admin/room/{room["_id"]}/availability',
                          query_string={'checkIn': '2030-03-01', 'checkOut': '2030-03-05'})
        quiet = client.get(f'/admin/room/{room["_id"]}/availability',
                           query_string={'checkIn': '2030-03-04', 'checkOut': '2030-03-06'})

        assert busy.get_json()['RoomOptions'][0]['Available'] == 1
        assert quiet.get_json()['RoomOptions'][0]['Available'] == 3

    def test_bad_dates(self, client, create_room):
        room = create_room()

        missing = client.get(f'/admin/room/{room["_id"]}/availability', query_string={'checkIn': '2030-03-01'})
        garbled = client.get(f'/admin/room/{room["_id"]}/availability',
                             query_string={'checkIn': 'soon', 'checkOut': '2030-03-02'})
        reversed_ = client.get(f'/admin/room/{room["_id"]}/availability',
                               query_string={'checkIn': '2030-03-05', 'checkOut': '2030-03-01'})

        assert missing.status_code == garbled.status_code == reversed_.status_code == 400

    def test_open_ended_range_is_answered(self, client, user_headers, create_room, create_hotel):
        room = create_room({'NumOfEmptyRooms': 2})
        hotel = create_hotel(Rooms=[room['_id']])
        client.post('/newBooking', headers=user_headers, json={
            'Hotel': hotel['_id'], 'Room': room['_id'],
            'CheckInDate': '2030-03-01', 'CheckOutDate': '2030-03-04', 'NumberOfGuests': 1,
        })

        response = client.get(f'/admin/room/{room["_id"]}/availability',
                              query_string={'checkIn': '0001-01-01', 'checkOut': '9999-12-31'})

        assert response.status_code == 200
        assert response.get_json()['RoomOptions'][0]['Available'] == 1
